"""Datetime utility functions.

Timestamps inside the engine are epoch milliseconds; calendar arithmetic is
done in the local timezone, the way a device calendar reports "today".
"""

import time
from datetime import datetime, timedelta

MILLIS_PER_DAY = 24 * 60 * 60 * 1000


def now_millis() -> int:
    """Return the current time as epoch milliseconds."""
    return time.time_ns() // 1_000_000


def to_local(millis: int) -> datetime:
    """Convert epoch milliseconds to a naive local datetime."""
    return datetime.fromtimestamp(millis / 1000)


def to_millis(value: datetime) -> int:
    """Convert a (naive local or aware) datetime to epoch milliseconds."""
    return int(value.timestamp() * 1000)


def start_of_day(value: datetime) -> datetime:
    """Return local midnight of the given day."""
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_week(value: datetime, first_day_of_week: int = 0) -> datetime:
    """
    Return midnight of the first day of the week containing ``value``.

    Args:
        value: Local datetime
        first_day_of_week: 0 = Monday ... 6 = Sunday

    Returns:
        Local datetime at midnight
    """
    offset = (value.weekday() - first_day_of_week) % 7
    return start_of_day(value) - timedelta(days=offset)


def start_of_month(value: datetime) -> datetime:
    """Return midnight of the first day of the month."""
    return start_of_day(value).replace(day=1)


def previous_month_start(value: datetime) -> datetime:
    """Return midnight of the first day of the previous month."""
    first = start_of_month(value)
    return start_of_month(first - timedelta(days=1))


def days_between(earlier_millis: int, later_millis: int) -> int:
    """Whole days elapsed between two timestamps, never negative."""
    return max(0, (later_millis - earlier_millis) // MILLIS_PER_DAY)
