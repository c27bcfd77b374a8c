"""Time-of-day primitives.

A time-of-day is an ``int`` count of minutes since midnight in ``[0, 1439]``.
It is parsed from, and formatted back to, a canonical 24-hour ``HH:mm`` string.
"""
from __future__ import annotations

import re
from datetime import date, datetime, time
from typing import Optional

from ..core.constants import TIME_OF_DAY_FORMAT
from ..core.exceptions import InvalidFormat

TIME_REGEX = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def parse_time_of_day(value: str) -> int:
    """Parse ``HH:mm`` into minutes since midnight."""
    match = TIME_REGEX.fullmatch(value) if isinstance(value, str) else None
    if not match:
        raise InvalidFormat(f"Invalid time format: {value}. Expected {TIME_OF_DAY_FORMAT}")
    return int(match.group(1)) * 60 + int(match.group(2))


def format_time_of_day(minutes: int) -> str:
    hours, mins = divmod(int(minutes), 60)
    return f"{hours:02d}:{mins:02d}"


def duration_minutes(start: str, end: str) -> int:
    """Signed ``end - start`` in minutes.

    Returns 0 when either value is not a valid time-of-day; strict checking
    belongs to the validators.
    """
    try:
        return parse_time_of_day(end) - parse_time_of_day(start)
    except InvalidFormat:
        return 0


def intervals_overlap(start1: int, end1: int, start2: int, end2: int) -> bool:
    """Half-open ``[start, end)`` overlap; touching ranges do not overlap."""
    return start1 < end2 and start2 < end1


def format_range(start: int, end: int) -> str:
    return f"{format_time_of_day(start)}-{format_time_of_day(end)}"


def to_time(minutes: Optional[int]) -> Optional[time]:
    """Minutes since midnight -> ``datetime.time`` for TIME columns."""
    if minutes is None:
        return None
    hours, mins = divmod(int(minutes), 60)
    return time(hour=hours, minute=mins)


def from_time(value: Optional[time]) -> Optional[int]:
    if value is None:
        return None
    return value.hour * 60 + value.minute


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()
