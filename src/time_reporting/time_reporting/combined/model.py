from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class CombinedResult:
    attendance_id: int
    time_log_ids: Tuple[int, ...]

    def to_dict(self) -> dict:
        return {
            "attendanceId": str(self.attendance_id),
            "timeLogIds": [str(i) for i in self.time_log_ids],
        }
