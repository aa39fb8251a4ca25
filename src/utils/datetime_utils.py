"""Datetime utilities for timezone-aware UTC timestamps.

SQLite hands timestamps back without tzinfo even when they were written as
aware UTC values, so anything comparing recorded dates goes through
``as_utc()`` first.

Usage:
    from src.utils.datetime_utils import utc_now, as_utc

    # For SQLAlchemy Column defaults
    created_at = Column(DateTime, default=utc_now)

    # Comparing a stored timestamp with a fresh one
    if as_utc(price_point.date_recorded) < utc_now():
        ...
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime.

    Returns:
        Current UTC datetime with timezone info
    """
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize a datetime to an aware UTC value.

    Naive datetimes are assumed to already be in UTC.

    Args:
        value: Datetime to normalize (None passes through)

    Returns:
        Aware UTC datetime, or None
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_date(value: Optional[datetime]) -> str:
    """Format a timestamp as an ISO calendar date (YYYY-MM-DD)."""
    if value is None:
        return ""
    return as_utc(value).date().isoformat()
