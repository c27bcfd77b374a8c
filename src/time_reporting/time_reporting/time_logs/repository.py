from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Location
from .model import TimeLogAllocation


class TimeLogRepository(Protocol):
    """Time log storage bound to one open transaction."""

    def find_by_attendance(self, attendance_id: int, *, for_update: bool = False) -> Sequence[TimeLogAllocation]:
        """Time logs of a window in creation order.

        ``for_update`` makes this a locking read of the current rows.
        """

        raise NotImplementedError

    def find(self, time_log_id: int, *, for_update: bool = False) -> Optional[TimeLogAllocation]:
        raise NotImplementedError

    def insert(
        self,
        *,
        attendance_id: int,
        task_id: int,
        duration_min: int,
        location: Location,
        start_time: Optional[int] = None,
        end_time: Optional[int] = None,
        description: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def update(
        self,
        time_log_id: int,
        *,
        task_id: int,
        duration_min: int,
        location: Location,
        start_time: Optional[int],
        end_time: Optional[int],
        description: Optional[str],
    ) -> bool:
        raise NotImplementedError

    def delete(self, time_log_id: int) -> bool:
        raise NotImplementedError
