from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.time_utils import format_time_of_day
from ..core.enums import Location


@dataclass(frozen=True)
class TimeLogAllocation:
    """A slice of an attendance window attributed to one task."""

    time_log_id: int
    attendance_id: int
    task_id: int
    duration_min: int
    location: Location
    start_time: Optional[int] = None
    end_time: Optional[int] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": str(self.time_log_id),
            "dailyAttendanceId": str(self.attendance_id),
            "taskId": str(self.task_id),
            "duration": self.duration_min,
            "startTime": format_time_of_day(self.start_time) if self.start_time is not None else None,
            "endTime": format_time_of_day(self.end_time) if self.end_time is not None else None,
            "location": self.location.value,
            "description": self.description,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(frozen=True)
class AllocationDraft:
    """Unvalidated input for one time log (as received from the caller)."""

    task_id: int
    location: str
    duration: Optional[int] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class PreparedAllocation:
    """A validated time log ready to be inserted under a window."""

    task_id: int
    duration_min: int
    location: Location
    start_time: Optional[int] = None
    end_time: Optional[int] = None
    description: Optional[str] = None
