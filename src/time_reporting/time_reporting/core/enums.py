from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Trạng thái của một bản ghi chấm công trong ngày."""

    WORK = "work"
    SICKNESS = "sickness"
    RESERVES = "reserves"
    DAY_OFF = "dayOff"
    HALF_DAY_OFF = "halfDayOff"


# Absence statuses that cannot share a day with any other record.
EXCLUSIVE_STATUSES = frozenset(
    {
        AttendanceStatus.SICKNESS,
        AttendanceStatus.RESERVES,
        AttendanceStatus.DAY_OFF,
    }
)

# Statuses whose [start, end) ranges must not overlap on the same day.
TIMED_STATUSES = frozenset({AttendanceStatus.WORK, AttendanceStatus.HALF_DAY_OFF})

# Statuses that may carry a supporting document (medical note, call-up order).
DOCUMENT_STATUSES = frozenset({AttendanceStatus.SICKNESS, AttendanceStatus.RESERVES})


class ReportingType(str, Enum):
    """How a project's tasks are logged."""

    DURATION = "duration"
    START_END = "startEnd"


class Location(str, Enum):
    OFFICE = "office"
    CLIENT = "client"
    HOME = "home"
