"""
Datetime utility functions for handling timezone-aware datetimes.
"""
from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """
    Return the current datetime in UTC timezone.

    Every "now" in the attempt lifecycle and availability checks goes through
    this function so tests can patch a single place.
    """
    return datetime.now(timezone.utc)


def ensure_timezone_aware(dt: Optional[datetime]) -> datetime:
    """
    Ensure a datetime object is timezone-aware (UTC).

    SQLite returns naive datetimes even for DateTime(timezone=True) columns,
    and clients may post naive schedule windows; both are taken as UTC.

    Raises:
        ValueError: If dt is None
    """
    if dt is None:
        raise ValueError("datetime cannot be None")
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
