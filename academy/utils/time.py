"""Time Utilities for UTC management"""

from datetime import datetime, timedelta, timezone


def get_utc_now() -> datetime:
    """
    Returns a naive UTC datetime.
    Matches the DB schema (TIMESTAMP WITHOUT TIME ZONE).
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def utc_from_now(days: int = 0, hours: int = 0) -> datetime:
    """Naive UTC datetime offset from now."""
    return get_utc_now() + timedelta(days=days, hours=hours)


def to_naive_utc(value: datetime) -> datetime:
    """Normalize an aware datetime to naive UTC; naive values are assumed UTC already."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
