"""
UTC time helpers

Timestamps are stored as naive UTC datetimes so they compare cleanly on both
SQLite and PostgreSQL.
"""
from datetime import datetime, timedelta, timezone

from metering.core.config import settings


def utcnow() -> datetime:
    """Current time as a naive UTC datetime"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def usage_window() -> timedelta:
    """Length of the rolling usage window"""
    return timedelta(days=settings.USAGE_WINDOW_DAYS)


def is_window_expired(window_started_at: datetime, now: datetime, window: timedelta = None) -> bool:
    """True once strictly more than one window length has elapsed"""
    window = window or usage_window()
    return now - window_started_at > window
