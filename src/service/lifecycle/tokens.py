"""Email verification tokens and quota windows."""

import secrets
from datetime import datetime, timedelta
from typing import Optional, Tuple

from src.core.clock import next_midnight, utc_now

from .settings import LifecycleSettings, lifecycle_settings


def generate_verification_token(
    now: Optional[datetime] = None,
    settings: LifecycleSettings = lifecycle_settings,
) -> Tuple[str, datetime]:
    """
    Create a fresh email verification token and its expiry.

    Returns:
        Hex-encoded random token and the time it stops being valid
    """
    now = now or utc_now()
    token = secrets.token_hex(settings.verification_token_bytes)
    expires_at = now + timedelta(hours=settings.verification_token_expiry_hours)
    return token, expires_at


def next_quota_reset(now: Optional[datetime] = None) -> datetime:
    """When the daily quota window that contains ``now`` ends."""
    return next_midnight(now)
