"""
DateTime utilities for adoption operations.

This module provides timezone-aware datetime handling used across the
package: current UTC time, normalization of values read back from
databases that drop timezone information, and calendar windows used by
reporting filters.
"""

import calendar
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple


def get_current_utc() -> datetime:
    """Get the current UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Return a timezone-aware UTC datetime.

    Naive values are assumed to already be in UTC. SQLite returns naive
    datetimes even for ``DateTime(timezone=True)`` columns.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def is_in_past(dt: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """Check if a datetime is at or before now. ``None`` never expires."""
    if dt is None:
        return False
    now = ensure_utc(now) if now is not None else get_current_utc()
    return ensure_utc(dt) <= now


def hours_from_now(hours: float, now: Optional[datetime] = None) -> datetime:
    """Get a UTC datetime the given number of hours from now."""
    base = ensure_utc(now) if now is not None else get_current_utc()
    return base + timedelta(hours=hours)


def month_window(year: int, month: Optional[int] = None) -> Tuple[datetime, datetime]:
    """
    Get the half-open UTC window covering a month, or a whole year.

    Args:
        year: Calendar year
        month: Month number 1-12, or None for the whole year

    Returns:
        Tuple of (start inclusive, end exclusive)

    Raises:
        ValueError: If the month is out of range
    """
    if month is None:
        start = datetime(year, 1, 1, tzinfo=timezone.utc)
        end = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
        return start, end

    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")

    days = calendar.monthrange(year, month)[1]
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    return start, start + timedelta(days=days)

