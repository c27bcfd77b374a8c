from __future__ import annotations

import itertools
import threading
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Optional, TypeVar

import pytest

from time_reporting.attendance.model import AttendanceWindow
from time_reporting.combined.service import CombinedAttendanceService
from time_reporting.container import build_container_for_store
from time_reporting.core.enums import AttendanceStatus, Location, ReportingType
from time_reporting.database.store import TransactionScope
from time_reporting.tasks.model import Task
from time_reporting.time_logs.model import TimeLogAllocation
from time_reporting.attendance.service import AttendanceService
from time_reporting.time_logs.service import TimeLogService

T = TypeVar("T")

DURATION_TASK = 1
START_END_TASK = 2
OTHER_DURATION_TASK = 3

FIXED_NOW = datetime(2026, 3, 2, 8, 0, 0)


class InMemoryAttendance:
    def __init__(self, store: "InMemoryStore"):
        self._store = store

    def find_windows(self, user_id, work_date, *, for_update=False):
        self._store.locked_reads.append(("windows", user_id, work_date, for_update))
        return sorted(
            (w for w in self._store.windows.values() if w.user_id == user_id and w.work_date == work_date),
            key=lambda w: w.attendance_id,
        )

    def find_window(self, attendance_id, *, for_update=False):
        self._store.locked_reads.append(("window", attendance_id, for_update))
        return self._store.windows.get(attendance_id)

    def find_windows_between(self, user_id, start_date, end_date):
        rows = [w for w in self._store.windows.values() if w.user_id == user_id and start_date <= w.work_date <= end_date]
        return sorted(rows, key=lambda w: (-w.work_date.toordinal(), w.start_time or 0))

    def insert_window(self, *, user_id, work_date, status, start_time, end_time):
        attendance_id = next(self._store.ids)
        self._store.windows[attendance_id] = AttendanceWindow(
            attendance_id=attendance_id,
            user_id=user_id,
            work_date=work_date,
            status=status,
            start_time=start_time,
            end_time=end_time,
            created_at=FIXED_NOW,
            updated_at=FIXED_NOW,
        )
        return attendance_id

    def update_window(self, attendance_id, *, status, start_time, end_time):
        current = self._store.windows.get(attendance_id)
        if not current:
            return False
        self._store.windows[attendance_id] = replace(current, status=status, start_time=start_time, end_time=end_time)
        return True

    def set_document(self, attendance_id, content):
        current = self._store.windows.get(attendance_id)
        if not current:
            return False
        self._store.windows[attendance_id] = replace(current, has_document=True)
        self._store.documents[attendance_id] = content
        return True


class InMemoryTimeLogs:
    def __init__(self, store: "InMemoryStore"):
        self._store = store

    def find_by_attendance(self, attendance_id, *, for_update=False):
        self._store.locked_reads.append(("time_logs", attendance_id, for_update))
        return sorted(
            (log for log in self._store.time_logs.values() if log.attendance_id == attendance_id),
            key=lambda log: log.time_log_id,
        )

    def find(self, time_log_id, *, for_update=False):
        self._store.locked_reads.append(("time_log", time_log_id, for_update))
        return self._store.time_logs.get(time_log_id)

    def insert(self, *, attendance_id, task_id, duration_min, location, start_time=None, end_time=None, description=None):
        time_log_id = next(self._store.ids)
        self._store.time_logs[time_log_id] = TimeLogAllocation(
            time_log_id=time_log_id,
            attendance_id=attendance_id,
            task_id=task_id,
            duration_min=duration_min,
            location=location,
            start_time=start_time,
            end_time=end_time,
            description=description,
            created_at=FIXED_NOW,
            updated_at=FIXED_NOW,
        )
        return time_log_id

    def update(self, time_log_id, *, task_id, duration_min, location, start_time, end_time, description):
        current = self._store.time_logs.get(time_log_id)
        if not current:
            return False
        self._store.time_logs[time_log_id] = replace(
            current,
            task_id=task_id,
            duration_min=duration_min,
            location=location,
            start_time=start_time,
            end_time=end_time,
            description=description,
        )
        return True

    def delete(self, time_log_id):
        return self._store.time_logs.pop(time_log_id, None) is not None


class InMemoryTasks:
    def __init__(self, store: "InMemoryStore"):
        self._store = store

    def find_task(self, task_id) -> Optional[Task]:
        return self._store.tasks.get(task_id)


class InMemoryStore:
    """Store fake: one lock per transaction, snapshot restored on error."""

    def __init__(self):
        self.windows: dict[int, AttendanceWindow] = {}
        self.time_logs: dict[int, TimeLogAllocation] = {}
        self.documents: dict[int, bytes] = {}
        self.tasks: dict[int, Task] = {}
        self.ids = itertools.count(1)
        self.locked_reads: list[tuple] = []
        self.commits = 0
        self.rollbacks = 0
        self._lock = threading.Lock()

    def add_task(self, task_id: int, reporting_type: ReportingType, *, project_id: int = 1) -> None:
        self.tasks[task_id] = Task(task_id=task_id, project_id=project_id, reporting_type=reporting_type)

    def run_in_transaction(self, fn: Callable[[TransactionScope], T]) -> T:
        with self._lock:
            snapshot = (dict(self.windows), dict(self.time_logs), dict(self.documents))
            scope = TransactionScope(
                attendance=InMemoryAttendance(self),
                time_logs=InMemoryTimeLogs(self),
                tasks=InMemoryTasks(self),
            )
            try:
                result = fn(scope)
            except Exception:
                self.windows, self.time_logs, self.documents = snapshot
                self.rollbacks += 1
                raise
            self.commits += 1
            return result

    # Test helpers that bypass the services (seed state directly).
    def seed_window(self, *, user_id=1, work_date=date(2026, 3, 2), status=AttendanceStatus.WORK, start=None, end=None):
        return self.run_in_transaction(
            lambda tx: tx.attendance.insert_window(
                user_id=user_id, work_date=work_date, status=status, start_time=start, end_time=end
            )
        )

    def seed_time_log(self, attendance_id, *, duration_min, task_id=DURATION_TASK, location=Location.OFFICE):
        return self.run_in_transaction(
            lambda tx: tx.time_logs.insert(
                attendance_id=attendance_id, task_id=task_id, duration_min=duration_min, location=location
            )
        )


@pytest.fixture
def store() -> InMemoryStore:
    s = InMemoryStore()
    s.add_task(DURATION_TASK, ReportingType.DURATION)
    s.add_task(START_END_TASK, ReportingType.START_END, project_id=2)
    s.add_task(OTHER_DURATION_TASK, ReportingType.DURATION)
    return s


@pytest.fixture
def attendance_service(store) -> AttendanceService:
    return AttendanceService(store, max_document_bytes=1024)


@pytest.fixture
def time_log_service(store) -> TimeLogService:
    return TimeLogService(store)


@pytest.fixture
def combined_service(store) -> CombinedAttendanceService:
    return CombinedAttendanceService(store)


@pytest.fixture
def container(store):
    return build_container_for_store(store, max_document_bytes=1024)
