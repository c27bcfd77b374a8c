from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceWindow


class AttendanceRepository(Protocol):
    """Attendance storage bound to one open transaction."""

    def find_windows(self, user_id: int, work_date: date, *, for_update: bool = False) -> Sequence[AttendanceWindow]:
        """All windows of a user on a date.

        ``for_update`` locks the (user, date) partition until the transaction ends.
        """

        raise NotImplementedError

    def find_window(self, attendance_id: int, *, for_update: bool = False) -> Optional[AttendanceWindow]:
        raise NotImplementedError

    def find_windows_between(self, user_id: int, start_date: date, end_date: date) -> Sequence[AttendanceWindow]:
        """Windows with ``start_date <= work_date <= end_date``, newest first."""

        raise NotImplementedError

    def insert_window(
        self,
        *,
        user_id: int,
        work_date: date,
        status: AttendanceStatus,
        start_time: Optional[int],
        end_time: Optional[int],
    ) -> int:
        raise NotImplementedError

    def update_window(
        self,
        attendance_id: int,
        *,
        status: AttendanceStatus,
        start_time: Optional[int],
        end_time: Optional[int],
    ) -> bool:
        raise NotImplementedError

    def set_document(self, attendance_id: int, content: bytes) -> bool:
        raise NotImplementedError
