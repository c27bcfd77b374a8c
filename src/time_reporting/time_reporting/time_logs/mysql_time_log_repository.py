from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..common.time_utils import to_time
from ..core.enums import Location
from ..database.mysql_base import fetchall, fetchone, lock_clause, time_column_to_minutes
from .model import TimeLogAllocation
from .repository import TimeLogRepository

_COLUMNS = """
    time_log_id, attendance_id, task_id, duration_min, start_time, end_time,
    location, description, created_at, updated_at
"""


def _to_time_log(r: Dict[str, Any]) -> TimeLogAllocation:
    return TimeLogAllocation(
        time_log_id=int(r["time_log_id"]),
        attendance_id=int(r["attendance_id"]),
        task_id=int(r["task_id"]),
        duration_min=int(r["duration_min"]),
        location=Location(r["location"]),
        start_time=time_column_to_minutes(r.get("start_time")),
        end_time=time_column_to_minutes(r.get("end_time")),
        description=r.get("description"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLTimeLogRepository(TimeLogRepository):
    def __init__(self, cur):
        self._cur = cur

    def find_by_attendance(self, attendance_id: int, *, for_update: bool = False) -> Sequence[TimeLogAllocation]:
        self._cur.execute(
            f"""
            SELECT {_COLUMNS}
            FROM project_time_logs
            WHERE attendance_id=%s
            ORDER BY created_at, time_log_id
            {lock_clause(for_update)}
            """,
            (attendance_id,),
        )
        return [_to_time_log(r) for r in fetchall(self._cur)]

    def find(self, time_log_id: int, *, for_update: bool = False) -> Optional[TimeLogAllocation]:
        self._cur.execute(
            f"SELECT {_COLUMNS} FROM project_time_logs WHERE time_log_id=%s{lock_clause(for_update)}",
            (time_log_id,),
        )
        r = fetchone(self._cur)
        return _to_time_log(r) if r else None

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
        self._cur.execute(
            """
            INSERT INTO project_time_logs(attendance_id, task_id, duration_min, start_time, end_time, location, description)
            VALUES(%s,%s,%s,%s,%s,%s,%s)
            """,
            (
                attendance_id,
                task_id,
                int(duration_min),
                to_time(start_time),
                to_time(end_time),
                location.value,
                description,
            ),
        )
        return int(self._cur.lastrowid)

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
        self._cur.execute(
            """
            UPDATE project_time_logs
            SET task_id=%s, duration_min=%s, start_time=%s, end_time=%s, location=%s, description=%s
            WHERE time_log_id=%s
            """,
            (
                task_id,
                int(duration_min),
                to_time(start_time),
                to_time(end_time),
                location.value,
                description,
                time_log_id,
            ),
        )
        return self._cur.rowcount > 0

    def delete(self, time_log_id: int) -> bool:
        self._cur.execute("DELETE FROM project_time_logs WHERE time_log_id=%s", (time_log_id,))
        return self._cur.rowcount > 0
