"""Time helpers shared across layers."""

from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    """Current UTC time as a naive datetime, matching how timestamps are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def next_midnight(now: datetime | None = None) -> datetime:
    """Start of the next UTC day."""
    now = now or utc_now()
    return datetime(now.year, now.month, now.day) + timedelta(days=1)
