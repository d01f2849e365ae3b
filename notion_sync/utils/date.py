"""
Date parsing and formatting utilities.
"""

from datetime import date, datetime, timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
import logging

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime to aware UTC.

    Naive datetimes are treated as already being in UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO 8601 timestamp into an aware UTC datetime.

    Accepts the trailing ``Z`` Notion uses and fractional seconds.
    Returns None for empty or unparseable input.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except (AttributeError, ValueError):
        return None
    return ensure_utc(parsed)


def format_datetime(value: Optional[datetime]) -> Optional[str]:
    """Format a datetime as an ISO 8601 UTC string."""
    if value is None:
        return None
    return ensure_utc(value).isoformat()


def parse_date(date_str: Optional[str]) -> Optional[date]:
    """
    Parse a date string into a date object.

    Handles various formats:
    - ISO format (YYYY-MM-DD)
    - ISO datetime (YYYY-MM-DDTHH:MM:SS)

    Args:
        date_str: Date string to parse

    Returns:
        Parsed date object or None if invalid
    """
    if not date_str:
        return None

    # Take only date part if it's a datetime string
    if 'T' in date_str:
        date_str = date_str.split('T')[0]

    try:
        return datetime.strptime(date_str, '%Y-%m-%d').date()
    except ValueError:
        return None


def format_date(d: Optional[date]) -> Optional[str]:
    """Format a date object as ISO string (YYYY-MM-DD)."""
    if not d:
        return None

    return d.strftime('%Y-%m-%d')


def _localize(naive: datetime, time_zone: Optional[str]) -> datetime:
    if time_zone:
        try:
            return naive.replace(tzinfo=ZoneInfo(time_zone))
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Unknown time zone {time_zone!r}, reading due time as UTC")
    return naive.replace(tzinfo=timezone.utc)


def parse_due(value: Optional[str], time_zone: Optional[str] = None) -> Tuple[Optional[datetime], bool]:
    """
    Parse a Notion date ``start`` into ``(due_date, has_due_time)``.

    Date-only values become midnight UTC on that day. A value carries a
    time component iff it contains ``T``. Timed values without an offset are
    wall-clock times in ``time_zone`` (the date property's ``time_zone``),
    or UTC when none is given.
    """
    if not value:
        return None, False

    if 'T' in value:
        try:
            parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
        except ValueError:
            parsed = None
        if parsed is not None:
            if parsed.tzinfo is None:
                parsed = _localize(parsed, time_zone)
            return parsed.astimezone(timezone.utc), True

    day = parse_date(value)
    if day is None:
        return None, False
    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc), False


def format_due(due_date: Optional[datetime], has_due_time: bool) -> Optional[str]:
    """
    Format a due date for Notion.

    Full ISO timestamp when the due date has a time, ``YYYY-MM-DD`` otherwise.
    """
    if due_date is None:
        return None
    if has_due_time:
        return ensure_utc(due_date).replace(microsecond=0).isoformat()
    return format_date(due_date.date())
