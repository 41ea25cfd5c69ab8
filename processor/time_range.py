"""Time range calculation for calendar queries in the local time zone."""
from datetime import datetime, timezone
from typing import Optional

from processor.models import TimeRange


def current_day_range(now: Optional[datetime] = None) -> TimeRange:
    """
    Get the time range for the current day in the local time zone.

    Args:
        now: Reference instant (default: the current time)

    Returns:
        TimeRange from local midnight to 23:59:59.999
    """
    day = (now or datetime.now()).astimezone().date()
    # Naive wall-clock times pick up the offset in force at that instant
    start = datetime(day.year, day.month, day.day).astimezone()
    end = datetime(day.year, day.month, day.day, 23, 59, 59, 999000).astimezone()
    return TimeRange(start=start, end=end)


def custom_range(start: datetime, end: datetime) -> TimeRange:
    """
    Create a custom time range from the provided instants.

    Ordering is not checked; a reversed range simply matches no events.

    Raises:
        TypeError: If either bound is not a datetime
    """
    for name, value in (('start', start), ('end', end)):
        if not isinstance(value, datetime):
            raise TypeError(
                f"{name} must be a datetime, got {type(value).__name__}"
            )
    return TimeRange(start=start, end=end)


def parse_instant(value: str) -> datetime:
    """
    Parse an RFC 3339 timestamp such as 2024-03-15T09:00:00Z.

    Raises:
        ValueError: If the string is not a valid timestamp
    """
    text = value.strip()
    if text.endswith('Z') or text.endswith('z'):
        text = text[:-1] + '+00:00'
    return datetime.fromisoformat(text)


def to_api_string(instant: datetime) -> str:
    """Format an instant as a UTC ISO string with milliseconds."""
    utc = instant.astimezone(timezone.utc)
    return utc.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def format_date_local(instant: datetime) -> str:
    """Format an instant as YYYY-MM-DD in the local time zone."""
    return instant.astimezone().strftime('%Y-%m-%d')


def format_time_local(instant: datetime) -> str:
    """Format an instant as HH:mm in the local time zone."""
    return instant.astimezone().strftime('%H:%M')
