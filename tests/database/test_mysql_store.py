from __future__ import annotations

from datetime import date, time, timedelta

import pytest

from time_reporting.attendance.mysql_attendance_repository import MySQLAttendanceRepository
from time_reporting.core.enums import AttendanceStatus, Location, ReportingType
from time_reporting.core.exceptions import DurationBelowLogs
from time_reporting.database.bootstrap import iter_sql_statements
from time_reporting.database.mysql_base import normalize_mysql_time
from time_reporting.database.store import MySQLStore
from time_reporting.tasks.mysql_task_repository import MySQLTaskRepository
from time_reporting.time_logs.mysql_time_log_repository import MySQLTimeLogRepository
from time_reporting.time_logs.service import TimeLogService


class FakeCursor:
    def __init__(self, rows=None):
        self.rows = list(rows or [])
        self.executed: list[tuple[str, tuple]] = []
        self.lastrowid = 0
        self.rowcount = 1
        self.closed = False

    def execute(self, sql, params=()):
        self.executed.append((" ".join(sql.split()), params))
        self.lastrowid += 1

    def fetchone(self):
        return self.rows[0] if self.rows else None

    def fetchall(self):
        return self.rows

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, cursor):
        self._cursor = cursor
        self.events: list[str] = []

    def start_transaction(self, isolation_level=None):
        self.events.append(f"start:{isolation_level}")

    def cursor(self, dictionary=False):
        return self._cursor

    def commit(self):
        self.events.append("commit")

    def rollback(self):
        self.events.append("rollback")

    def close(self):
        self.events.append("close")


class FakeConnFactory:
    def __init__(self, conn):
        self._conn = conn

    def connect(self):
        return self._conn


def test_store_commits_on_success():
    cur = FakeCursor()
    conn = FakeConnection(cur)
    store = MySQLStore(FakeConnFactory(conn), isolation_level="SERIALIZABLE")

    result = store.run_in_transaction(lambda tx: tx.attendance.set_document(5, b"x"))

    assert result is True
    assert conn.events == ["start:SERIALIZABLE", "commit", "close"]
    assert cur.closed


def test_store_rolls_back_on_error():
    conn = FakeConnection(FakeCursor())
    store = MySQLStore(FakeConnFactory(conn))

    def boom(tx):
        tx.time_logs.delete(1)
        raise RuntimeError("fail")

    with pytest.raises(RuntimeError):
        store.run_in_transaction(boom)

    assert conn.events == ["start:REPEATABLE READ", "rollback", "close"]


def test_find_windows_locks_when_asked():
    cur = FakeCursor(
        [
            {
                "attendance_id": 3,
                "user_id": 1,
                "work_date": date(2026, 3, 2),
                "start_time": timedelta(hours=9),
                "end_time": timedelta(hours=17, minutes=30),
                "status": "work",
                "has_document": 0,
            }
        ]
    )
    repo = MySQLAttendanceRepository(cur)

    windows = repo.find_windows(1, date(2026, 3, 2), for_update=True)
    repo.find_windows(1, date(2026, 3, 2))

    assert cur.executed[0][0].endswith("FOR UPDATE")
    assert not cur.executed[1][0].endswith("FOR UPDATE")
    assert windows[0].status is AttendanceStatus.WORK
    assert (windows[0].start_time, windows[0].end_time) == (540, 1050)


def test_insert_window_writes_time_columns():
    cur = FakeCursor()
    repo = MySQLAttendanceRepository(cur)

    new_id = repo.insert_window(
        user_id=1, work_date=date(2026, 3, 2), status=AttendanceStatus.WORK, start_time=540, end_time=1020
    )

    assert new_id == 1
    _, params = cur.executed[0]
    assert params == (1, date(2026, 3, 2), time(9, 0), time(17, 0), "work")


def test_time_log_repository_maps_rows():
    cur = FakeCursor(
        [
            {
                "time_log_id": 7,
                "attendance_id": 3,
                "task_id": 2,
                "duration_min": 90,
                "start_time": "09:00:00",
                "end_time": "10:30:00",
                "location": "client",
                "description": None,
            }
        ]
    )
    log = MySQLTimeLogRepository(cur).find(7)

    assert log.location is Location.CLIENT
    assert (log.start_time, log.end_time, log.duration_min) == (540, 630, 90)


def test_task_repository_resolves_reporting_type():
    cur = FakeCursor([{"task_id": 2, "project_id": 9, "task_name": "Install", "reporting_type": "startEnd"}])

    task = MySQLTaskRepository(cur).find_task(2)

    assert task.reporting_type is ReportingType.START_END
    assert task.project_id == 9


def test_normalize_mysql_time_variants():
    assert normalize_mysql_time(timedelta(hours=8, minutes=30)) == time(8, 30)
    assert normalize_mysql_time("08:30") == time(8, 30)
    assert normalize_mysql_time(None) is None
    with pytest.raises(TypeError):
        normalize_mysql_time(8.5)


def test_iter_sql_statements_splits_outside_quotes():
    sql = """
    -- comment; ignored
    CREATE TABLE a (x INT);
    INSERT INTO a VALUES ('semi;colon');
    INSERT INTO a VALUES ('it\\'s')
    """

    stmts = list(iter_sql_statements(sql))

    assert stmts == [
        "CREATE TABLE a (x INT)",
        "INSERT INTO a VALUES ('semi;colon')",
        "INSERT INTO a VALUES ('it\\'s')",
    ]


class RoutingCursor(FakeCursor):
    """Answers each SELECT by table and key; records every statement."""

    def __init__(self, *, window, log, siblings):
        super().__init__()
        self._routes = [
            ("FROM daily_attendance", [window]),
            ("FROM tasks", [{"task_id": 1, "project_id": 1, "task_name": "Support", "reporting_type": "duration"}]),
            ("FROM project_time_logs WHERE time_log_id", [log]),
            ("FROM project_time_logs WHERE attendance_id", siblings),
        ]

    def execute(self, sql, params=()):
        super().execute(sql, params)
        statement = self.executed[-1][0]
        self.rows = next((rows for marker, rows in self._routes if marker in statement), [])


def _window_row():
    return {
        "attendance_id": 3,
        "user_id": 1,
        "work_date": date(2026, 3, 2),
        "start_time": timedelta(hours=9),
        "end_time": timedelta(hours=17),
        "status": "work",
        "has_document": 0,
    }


def _log_row(time_log_id, duration_min):
    return {
        "time_log_id": time_log_id,
        "attendance_id": 3,
        "task_id": 1,
        "duration_min": duration_min,
        "start_time": None,
        "end_time": None,
        "location": "office",
        "description": None,
    }


def test_delete_allocation_uses_locking_reads_in_order():
    cur = RoutingCursor(window=_window_row(), log=_log_row(1, 480), siblings=[_log_row(1, 480), _log_row(2, 480)])
    conn = FakeConnection(cur)

    TimeLogService(MySQLStore(FakeConnFactory(conn))).delete_allocation(1)

    statements = [sql for sql, _ in cur.executed]
    assert "WHERE time_log_id=%s" in statements[0]
    assert "FROM daily_attendance" in statements[1]
    assert "WHERE attendance_id=%s" in statements[2] and "project_time_logs" in statements[2]
    assert all(sql.endswith("FOR UPDATE") for sql in statements[:3])
    assert statements[3].startswith("DELETE FROM project_time_logs")
    assert conn.events == ["start:REPEATABLE READ", "commit", "close"]


def test_delete_allocation_sees_sibling_removed_by_earlier_transaction():
    # The sibling (id 2) is already gone when the locking sum runs.
    cur = RoutingCursor(window=_window_row(), log=_log_row(1, 480), siblings=[_log_row(1, 480)])
    conn = FakeConnection(cur)

    with pytest.raises(DurationBelowLogs):
        TimeLogService(MySQLStore(FakeConnFactory(conn))).delete_allocation(1)

    assert not any(sql.startswith("DELETE") for sql, _ in cur.executed)
    assert conn.events == ["start:REPEATABLE READ", "rollback", "close"]


def test_update_allocation_sums_siblings_with_locking_read():
    cur = RoutingCursor(window=_window_row(), log=_log_row(1, 240), siblings=[_log_row(1, 240), _log_row(2, 240)])
    conn = FakeConnection(cur)

    TimeLogService(MySQLStore(FakeConnFactory(conn))).update_allocation(1, {"duration": 300})

    selects = [sql for sql, _ in cur.executed if sql.startswith("SELECT")]
    assert "WHERE time_log_id=%s" in selects[0]
    assert "FROM daily_attendance" in selects[1]
    log_reads = [sql for sql in selects if "FROM project_time_logs" in sql]
    assert log_reads and all(sql.endswith("FOR UPDATE") for sql in log_reads)
    assert selects.index(log_reads[-1]) > 1
    assert conn.events[-2:] == ["commit", "close"]
