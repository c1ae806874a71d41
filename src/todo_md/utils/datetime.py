"""Day-granularity datetime utilities.

This module provides the date arithmetic every other part of todo-md relies
on. All comparisons are made on local calendar days: instants are truncated
to midnight before they are compared, so time of day never changes a result.
"""

import re
from datetime import date, datetime, timedelta
from typing import Optional, Union

DateLike = Union[date, datetime]

DATE_FORMAT = "%Y-%m-%d"
DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S"

_ISO_DATE = re.compile(r"^([0-9]{4})-([0-9]{2})-([0-9]{2})$")
_ISO_DATETIME = re.compile(r"^([0-9]{4})-([0-9]{2})-([0-9]{2})T([0-9]{2}):([0-9]{2}):([0-9]{2})$")


def now_local() -> datetime:
    """Return the current local datetime (naive)."""
    return datetime.now()


def truncate_to_date(instant: DateLike) -> date:
    """Drop the time of day.

    Args:
        instant: A ``date`` or ``datetime``

    Returns:
        The calendar day of ``instant``
    """
    if isinstance(instant, datetime):
        return instant.date()
    return instant


def diff_in_whole_days(a: DateLike, b: DateLike) -> int:
    """Return the number of calendar days from ``a`` to ``b``.

    Both arguments are truncated first; the sign follows ``b - a``.
    """
    return (truncate_to_date(b) - truncate_to_date(a)).days


def shift_by_days(instant: DateLike, days: int) -> DateLike:
    """Shift a date by a whole number of days (positive or negative)."""
    return instant + timedelta(days=days)


def is_same_calendar_day(a: DateLike, b: DateLike) -> bool:
    """Check whether two instants fall on the same year/month/day."""
    return truncate_to_date(a) == truncate_to_date(b)


def parse_iso_date(text: str) -> Optional[date]:
    """Parse a strict ``YYYY-MM-DD`` string.

    Returns:
        The parsed date, or None if the string is malformed or names a day
        that does not exist (``2020-02-30``)
    """
    match = _ISO_DATE.match(text)
    if not match:
        return None
    try:
        return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError:
        return None


def parse_iso_datetime(text: str) -> Optional[datetime]:
    """Parse ``YYYY-MM-DD`` or ``YYYY-MM-DDTHH:MM:SS`` into a naive datetime."""
    day = parse_iso_date(text)
    if day is not None:
        return datetime(day.year, day.month, day.day)

    match = _ISO_DATETIME.match(text)
    if not match:
        return None
    try:
        return datetime(*(int(part) for part in match.groups()))
    except ValueError:
        return None


def to_date_string(instant: DateLike) -> str:
    """Format an instant as ``YYYY-MM-DD``."""
    return truncate_to_date(instant).strftime(DATE_FORMAT)


def to_iso_string(instant: Optional[DateLike], include_time: bool = False) -> Optional[str]:
    """Format an instant as ``YYYY-MM-DD`` or ``YYYY-MM-DDTHH:MM:SS``.

    Args:
        instant: Datetime to convert, or None
        include_time: Append the time of day (seconds precision)

    Returns:
        The formatted string, or None if input was None
    """
    if instant is None:
        return None
    if include_time and isinstance(instant, datetime):
        return instant.strftime(DATETIME_FORMAT)
    return to_date_string(instant)
