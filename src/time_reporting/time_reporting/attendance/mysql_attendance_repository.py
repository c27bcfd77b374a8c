from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..common.time_utils import to_time
from ..core.enums import AttendanceStatus
from ..database.mysql_base import fetchall, fetchone, lock_clause, time_column_to_minutes
from .model import AttendanceWindow
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, user_id, work_date, start_time, end_time, status,
    document IS NOT NULL AS has_document, created_at, updated_at
"""


def _to_window(r: Dict[str, Any]) -> AttendanceWindow:
    return AttendanceWindow(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        work_date=r["work_date"],
        status=AttendanceStatus(r["status"]),
        start_time=time_column_to_minutes(r.get("start_time")),
        end_time=time_column_to_minutes(r.get("end_time")),
        has_document=bool(r.get("has_document")),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, cur):
        self._cur = cur

    def find_windows(self, user_id: int, work_date: date, *, for_update: bool = False) -> Sequence[AttendanceWindow]:
        # Locking read on the (user_id, work_date) index also locks the gap,
        # so a concurrent insert for the same day waits for this transaction.
        self._cur.execute(
            f"""
            SELECT {_COLUMNS}
            FROM daily_attendance
            WHERE user_id=%s AND work_date=%s
            ORDER BY start_time, attendance_id
            {lock_clause(for_update)}
            """,
            (user_id, work_date),
        )
        return [_to_window(r) for r in fetchall(self._cur)]

    def find_window(self, attendance_id: int, *, for_update: bool = False) -> Optional[AttendanceWindow]:
        self._cur.execute(
            f"""
            SELECT {_COLUMNS}
            FROM daily_attendance
            WHERE attendance_id=%s
            {lock_clause(for_update)}
            """,
            (attendance_id,),
        )
        r = fetchone(self._cur)
        return _to_window(r) if r else None

    def find_windows_between(self, user_id: int, start_date: date, end_date: date) -> Sequence[AttendanceWindow]:
        self._cur.execute(
            f"""
            SELECT {_COLUMNS}
            FROM daily_attendance
            WHERE user_id=%s AND work_date BETWEEN %s AND %s
            ORDER BY work_date DESC, start_time
            """,
            (user_id, start_date, end_date),
        )
        return [_to_window(r) for r in fetchall(self._cur)]

    def insert_window(
        self,
        *,
        user_id: int,
        work_date: date,
        status: AttendanceStatus,
        start_time: Optional[int],
        end_time: Optional[int],
    ) -> int:
        self._cur.execute(
            """
            INSERT INTO daily_attendance(user_id, work_date, start_time, end_time, status)
            VALUES(%s,%s,%s,%s,%s)
            """,
            (user_id, work_date, to_time(start_time), to_time(end_time), status.value),
        )
        return int(self._cur.lastrowid)

    def update_window(
        self,
        attendance_id: int,
        *,
        status: AttendanceStatus,
        start_time: Optional[int],
        end_time: Optional[int],
    ) -> bool:
        self._cur.execute(
            """
            UPDATE daily_attendance
            SET status=%s, start_time=%s, end_time=%s
            WHERE attendance_id=%s
            """,
            (status.value, to_time(start_time), to_time(end_time), attendance_id),
        )
        return self._cur.rowcount > 0

    def set_document(self, attendance_id: int, content: bytes) -> bool:
        self._cur.execute(
            "UPDATE daily_attendance SET document=%s WHERE attendance_id=%s",
            (content, attendance_id),
        )
        return self._cur.rowcount > 0
