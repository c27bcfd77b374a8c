from __future__ import annotations

from typing import Optional

from ..core.enums import ReportingType
from ..database.mysql_base import fetchone
from .model import Task
from .repository import TaskRepository


class MySQLTaskRepository(TaskRepository):
    def __init__(self, cur):
        self._cur = cur

    def find_task(self, task_id: int) -> Optional[Task]:
        self._cur.execute(
            """
            SELECT t.task_id, t.project_id, t.task_name, p.reporting_type
            FROM tasks t
            JOIN projects p ON p.project_id = t.project_id
            WHERE t.task_id=%s AND t.deleted_at IS NULL
            """,
            (task_id,),
        )
        r = fetchone(self._cur)
        if not r:
            return None
        return Task(
            task_id=int(r["task_id"]),
            project_id=int(r["project_id"]),
            reporting_type=ReportingType(r["reporting_type"]),
            name=r.get("task_name"),
        )
