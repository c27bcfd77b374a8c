from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.time_utils import format_time_of_day
from ..core.enums import AttendanceStatus
from ..time_logs.model import TimeLogAllocation


@dataclass(frozen=True)
class AttendanceWindow:
    """Thực thể miền (domain): Bản ghi chấm công trong ngày.

    ``start_time``/``end_time`` are minutes since midnight.
    """

    attendance_id: int
    user_id: int
    work_date: date
    status: AttendanceStatus
    start_time: Optional[int] = None
    end_time: Optional[int] = None
    has_document: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def has_times(self) -> bool:
        return self.start_time is not None and self.end_time is not None

    @property
    def duration(self) -> Optional[int]:
        if not self.has_times:
            return None
        return self.end_time - self.start_time

    def to_dict(self) -> dict:
        return {
            "id": str(self.attendance_id),
            "userId": str(self.user_id),
            "date": self.work_date.isoformat(),
            "startTime": format_time_of_day(self.start_time) if self.start_time is not None else None,
            "endTime": format_time_of_day(self.end_time) if self.end_time is not None else None,
            "status": self.status.value,
            "document": True if self.has_document else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(frozen=True)
class AttendanceWithLogs:
    """Read-model for month history: a window plus its time logs."""

    window: AttendanceWindow
    time_logs: Sequence[TimeLogAllocation] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        data = self.window.to_dict()
        data["projectTimeLogs"] = [log.to_dict() for log in self.time_logs]
        return data
