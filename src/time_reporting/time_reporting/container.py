from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.service import AttendanceService
from .combined.service import CombinedAttendanceService
from .core.constants import DEFAULT_ISOLATION_LEVEL, MAX_DOCUMENT_BYTES
from .database.connection import DatabaseConnection, DBConfig
from .database.store import MySQLStore, Store
from .time_logs.service import TimeLogService


@dataclass(frozen=True)
class Container:
    store: Store

    attendance_service: AttendanceService
    time_log_service: TimeLogService
    combined_service: CombinedAttendanceService


def build_container_for_store(store: Store, *, max_document_bytes: int = MAX_DOCUMENT_BYTES) -> Container:
    return Container(
        store=store,
        attendance_service=AttendanceService(store, max_document_bytes=max_document_bytes),
        time_log_service=TimeLogService(store),
        combined_service=CombinedAttendanceService(store),
    )


def build_container(
    *,
    db_config: dict,
    isolation_level: Optional[str] = DEFAULT_ISOLATION_LEVEL,
    max_document_bytes: int = MAX_DOCUMENT_BYTES,
) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))
    store = MySQLStore(conn, isolation_level=isolation_level)
    return build_container_for_store(store, max_document_bytes=max_document_bytes)
