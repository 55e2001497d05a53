"""
Centralized DateTime Utilities
==============================

Device timestamps are stored and returned as timezone-aware UTC datetimes.

Functions:
- utc_now(): current UTC time, truncated to millisecond precision
- ensure_utc(): normalize naive/aware datetimes to aware UTC
- to_iso(): ISO 8601 string with a 'Z' suffix for UTC
"""
from datetime import datetime, timezone as dt_timezone
from typing import Optional


def utc_now() -> datetime:
    """
    Get current UTC time as a timezone-aware datetime.

    Truncated to milliseconds so the value survives a BSON round trip
    unchanged (MongoDB dates have millisecond precision).
    """
    now = datetime.now(dt_timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime into a timezone-aware UTC datetime.

    - If dt is None -> None
    - If dt is naive -> assume it represents UTC (this matches MongoDB/PyMongo behavior)
    - If dt is aware -> convert to UTC
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=dt_timezone.utc)
    return dt.astimezone(dt_timezone.utc)


def to_iso(dt: Optional[datetime]) -> Optional[str]:
    """
    Convert datetime object to ISO 8601 string.
    Naive datetimes are treated as UTC.

    Args:
        dt: datetime object (timezone-aware or naive)

    Returns:
        ISO 8601 formatted string, or None if dt is None
    """
    utc_dt = ensure_utc(dt)
    if utc_dt is None:
        return None
    return utc_dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")
