from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Protocol, TypeVar

from ..attendance.mysql_attendance_repository import MySQLAttendanceRepository
from ..attendance.repository import AttendanceRepository
from ..core.constants import DEFAULT_ISOLATION_LEVEL
from ..tasks.mysql_task_repository import MySQLTaskRepository
from ..tasks.repository import TaskRepository
from ..time_logs.mysql_time_log_repository import MySQLTimeLogRepository
from ..time_logs.repository import TimeLogRepository
from .connection import DatabaseConnection
from .mysql_base import db_transaction

T = TypeVar("T")


@dataclass(frozen=True)
class TransactionScope:
    """Repositories sharing one open transaction."""

    attendance: AttendanceRepository
    time_logs: TimeLogRepository
    tasks: TaskRepository


class Store(Protocol):
    def run_in_transaction(self, fn: Callable[[TransactionScope], T]) -> T:
        """Run ``fn`` in one transaction: commit on return, roll back on error."""

        raise NotImplementedError


class MySQLStore(Store):
    def __init__(self, conn_factory: DatabaseConnection, *, isolation_level: Optional[str] = DEFAULT_ISOLATION_LEVEL):
        self._conn_factory = conn_factory
        self._isolation_level = isolation_level

    def run_in_transaction(self, fn: Callable[[TransactionScope], T]) -> T:
        with db_transaction(self._conn_factory, isolation_level=self._isolation_level) as (_, cur):
            scope = TransactionScope(
                attendance=MySQLAttendanceRepository(cur),
                time_logs=MySQLTimeLogRepository(cur),
                tasks=MySQLTaskRepository(cur),
            )
            return fn(scope)
