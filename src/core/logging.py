"""Structured logging setup."""

import logging
import sys

import structlog

from src.core.config import settings


def setup_logging(level: str | None = None, fmt: str | None = None) -> None:
    """
    Configure structlog and the stdlib root logger.

    Log lines are JSON when ``log_format`` is ``json`` and human-readable
    otherwise. Values bound with ``structlog.contextvars`` (the request ID)
    are merged into every event.
    """
    log_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    log_format = fmt or settings.log_format

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )
    logging.getLogger("apscheduler").setLevel(max(log_level, logging.WARNING))
