from __future__ import annotations

import calendar
import logging
from datetime import date
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from ..common.time_utils import format_range, format_time_of_day, intervals_overlap, parse_time_of_day
from ..common.validators import (
    validate_document,
    validate_logs_cover_window,
    validate_no_midnight_crossing,
    validate_range,
)
from ..core.constants import MAX_DOCUMENT_BYTES
from ..core.enums import DOCUMENT_STATUSES, EXCLUSIVE_STATUSES, TIMED_STATUSES, AttendanceStatus
from ..core.exceptions import (
    DocumentNotAllowed,
    ExclusiveStatusConflict,
    ImmutableField,
    MissingTimes,
    NotFound,
    OverlapConflict,
    StatusChangeBlocked,
    ValidationError,
)
from ..database.store import Store, TransactionScope
from .model import AttendanceWindow, AttendanceWithLogs

logger = logging.getLogger(__name__)

_PATCHABLE_FIELDS = frozenset({"status", "start_time", "end_time"})
_IMMUTABLE_FIELDS = frozenset({"date", "work_date"})


def coerce_status(value: Any) -> AttendanceStatus:
    try:
        return AttendanceStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in AttendanceStatus)
        raise ValidationError(f"Status must be one of: {allowed}") from None


def validate_window_times(
    status: AttendanceStatus,
    start_time: Optional[str],
    end_time: Optional[str],
) -> Tuple[Optional[int], Optional[int]]:
    """Pure checks on a window's times; returns them as minutes (or Nones)."""
    if status is AttendanceStatus.WORK and (not start_time or not end_time):
        raise MissingTimes("Start time and end time are required for work status")
    if not start_time and not end_time:
        return None, None
    if not start_time or not end_time:
        raise MissingTimes("Start time and end time must be provided together")

    validate_range(start_time, end_time)
    validate_no_midnight_crossing(end_time)
    return parse_time_of_day(start_time), parse_time_of_day(end_time)


def check_exclusivity(existing: Sequence[AttendanceWindow], status: AttendanceStatus) -> None:
    """Exclusive statuses cannot share a user's day with any other window."""
    if status in EXCLUSIVE_STATUSES:
        if existing:
            raise ExclusiveStatusConflict(f"Cannot add {status.value} - other attendance already exists on this date")
        return

    for window in existing:
        if window.status in EXCLUSIVE_STATUSES:
            raise ExclusiveStatusConflict(
                f"Cannot add {status.value} attendance - exclusive status ({window.status.value}) "
                "already exists on this date"
            )


def check_overlap(existing: Sequence[AttendanceWindow], start_time: int, end_time: int) -> None:
    for window in existing:
        if window.status not in TIMED_STATUSES or not window.has_times:
            continue
        if intervals_overlap(start_time, end_time, window.start_time, window.end_time):
            raise OverlapConflict(
                f"Time range {format_range(start_time, end_time)} overlaps with existing attendance "
                f"{format_range(window.start_time, window.end_time)}"
            )


def _format_optional(minutes: Optional[int]) -> Optional[str]:
    return format_time_of_day(minutes) if minutes is not None else None


class AttendanceService:
    """Lifecycle of daily attendance windows.

    Every operation reads and writes through one transaction of the injected
    store; the (user, date) partition is read with a lock so two writers
    cannot both pass the overlap/exclusivity checks.
    """

    def __init__(self, store: Store, *, max_document_bytes: int = MAX_DOCUMENT_BYTES):
        self._store = store
        self._max_document_bytes = int(max_document_bytes)

    def create_window(
        self,
        *,
        user_id: int,
        work_date: date,
        status: AttendanceStatus | str,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
    ) -> int:
        status = coerce_status(status)
        start_min, end_min = validate_window_times(status, start_time, end_time)

        def _create(tx: TransactionScope) -> int:
            existing = tx.attendance.find_windows(user_id, work_date, for_update=True)
            check_exclusivity(existing, status)
            if start_min is not None:
                check_overlap(existing, start_min, end_min)
            return tx.attendance.insert_window(
                user_id=user_id,
                work_date=work_date,
                status=status,
                start_time=start_min,
                end_time=end_min,
            )

        attendance_id = self._store.run_in_transaction(_create)
        logger.info(
            "Created attendance %s for user %s on %s (%s)", attendance_id, user_id, work_date, status.value
        )
        return attendance_id

    def update_window(self, attendance_id: int, patch: Mapping[str, Any]) -> None:
        """Apply ``patch`` (status/start_time/end_time) to a stored window.

        Fields missing from the patch keep their stored value; an explicit
        ``None`` clears a time.
        """

        def _update(tx: TransactionScope) -> None:
            existing = tx.attendance.find_window(attendance_id, for_update=True)
            if not existing:
                raise NotFound("Attendance record not found")

            immutable = _IMMUTABLE_FIELDS.intersection(patch)
            if immutable:
                raise ImmutableField("Attendance date cannot be changed")
            unknown = set(patch) - _PATCHABLE_FIELDS
            if unknown:
                raise ValidationError(f"Unknown attendance field(s): {', '.join(sorted(unknown))}")

            new_status = coerce_status(patch["status"]) if "status" in patch else existing.status
            start_time = patch["start_time"] if "start_time" in patch else _format_optional(existing.start_time)
            end_time = patch["end_time"] if "end_time" in patch else _format_optional(existing.end_time)
            if new_status in EXCLUSIVE_STATUSES:
                start_time = end_time = None

            start_min, end_min = validate_window_times(new_status, start_time, end_time)

            if existing.status is AttendanceStatus.WORK and new_status is not AttendanceStatus.WORK:
                logs = tx.time_logs.find_by_attendance(attendance_id, for_update=True)
                if logs:
                    raise StatusChangeBlocked(
                        f"Cannot change to {new_status.value} status while time logs exist "
                        f"({len(logs)} logs). Delete time logs first."
                    )

            siblings = [
                w
                for w in tx.attendance.find_windows(existing.user_id, existing.work_date, for_update=True)
                if w.attendance_id != attendance_id
            ]
            check_exclusivity(siblings, new_status)
            if start_min is not None:
                check_overlap(siblings, start_min, end_min)

            time_changed = "start_time" in patch or "end_time" in patch
            stays_work = existing.status is AttendanceStatus.WORK and new_status is AttendanceStatus.WORK
            if time_changed and stays_work and start_min is not None:
                logs = tx.time_logs.find_by_attendance(attendance_id, for_update=True)
                total = sum(log.duration_min for log in logs)
                validate_logs_cover_window(
                    total,
                    end_min - start_min,
                    template="Total project time logs ({logged} min) must be >= attendance duration ({duration} min)",
                )

            tx.attendance.update_window(attendance_id, status=new_status, start_time=start_min, end_time=end_min)

        self._store.run_in_transaction(_update)
        logger.info("Updated attendance %s (%s)", attendance_id, ", ".join(sorted(patch)))

    def get_window(self, attendance_id: int) -> AttendanceWindow:
        window = self._store.run_in_transaction(lambda tx: tx.attendance.find_window(attendance_id))
        if not window:
            raise NotFound("Attendance record not found")
        return window

    def list_month(self, user_id: int, *, year: int, month: int) -> List[AttendanceWithLogs]:
        """Windows of one calendar month with their time logs, newest day first."""
        if not 1 <= int(month) <= 12:
            raise ValidationError("Month must be between 1 and 12")
        last_day = calendar.monthrange(int(year), int(month))[1]
        start = date(int(year), int(month), 1)
        end = date(int(year), int(month), last_day)

        def _list(tx: TransactionScope) -> List[AttendanceWithLogs]:
            windows = tx.attendance.find_windows_between(user_id, start, end)
            return [
                AttendanceWithLogs(window=w, time_logs=tuple(tx.time_logs.find_by_attendance(w.attendance_id)))
                for w in windows
            ]

        return self._store.run_in_transaction(_list)

    def attach_document(self, attendance_id: int, *, content: bytes, content_type: str, filename: str) -> None:
        validate_document(content, content_type=content_type, filename=filename, max_bytes=self._max_document_bytes)

        def _attach(tx: TransactionScope) -> None:
            window = tx.attendance.find_window(attendance_id, for_update=True)
            if not window:
                raise NotFound("Attendance record not found")
            if window.status not in DOCUMENT_STATUSES:
                raise DocumentNotAllowed(
                    f"Documents can only be attached to sickness or reserves attendance (status: {window.status.value})"
                )
            tx.attendance.set_document(attendance_id, content)

        self._store.run_in_transaction(_attach)
        logger.info("Attached document (%d bytes) to attendance %s", len(content), attendance_id)
