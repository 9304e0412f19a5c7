"""Shared time helpers used across the booking chain resolver."""

from datetime import date, datetime, timedelta
from typing import Union

from booking_chain.exceptions import InvalidTimeError

MINUTES_PER_DAY = 24 * 60


def parse_hhmm(value: str) -> int:
    """Convert an "HH:mm" string to minutes since midnight.

    "24:00" is accepted as the end of the day.

    Examples:
        >>> parse_hhmm("09:30")
        570
        >>> parse_hhmm("24:00")
        1440
    """
    text = str(value).strip()
    hours, sep, minutes = text.partition(":")
    if not sep or not hours.isdigit() or not minutes.isdigit() or len(minutes) != 2:
        raise InvalidTimeError(f"Invalid time (expected HH:mm): {value!r}")
    total = int(hours) * 60 + int(minutes)
    if int(minutes) > 59 or total > MINUTES_PER_DAY:
        raise InvalidTimeError(f"Time out of range: {value!r}")
    return total


def format_hhmm(minutes: Union[int, float]) -> str:
    """Format minutes since midnight as "HH:mm"."""
    whole = int(round(minutes))
    return f"{whole // 60:02d}:{whole % 60:02d}"


def parse_date(value: Union[str, date]) -> date:
    """Parse a "YYYY-MM-DD" string (datetimes and dates pass through)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
    except ValueError:
        raise InvalidTimeError(f"Invalid date (expected YYYY-MM-DD): {value!r}") from None


def at_time(day: date, hhmm: str) -> datetime:
    """Build the naive datetime for ``hhmm`` on ``day``."""
    return datetime.combine(day, datetime.min.time()) + timedelta(minutes=parse_hhmm(hhmm))


def add_minutes(moment: datetime, minutes: int) -> datetime:
    return moment + timedelta(minutes=minutes)
