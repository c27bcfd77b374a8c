from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Tuple

from ..common.time_utils import duration_minutes, format_time_of_day, parse_time_of_day
from ..common.validators import (
    validate_duration_positive_integer,
    validate_location,
    validate_logs_cover_window,
    validate_no_midnight_crossing,
    validate_range,
)
from ..core.enums import ReportingType
from ..core.exceptions import InvalidDuration, MissingTimes, NotFound, ValidationError
from ..database.store import Store, TransactionScope
from ..tasks.repository import TaskRepository
from .model import AllocationDraft, PreparedAllocation, TimeLogAllocation

logger = logging.getLogger(__name__)

_PATCHABLE_FIELDS = frozenset({"task_id", "duration", "start_time", "end_time", "location", "description"})
_DURATION_FIELDS = frozenset({"duration", "start_time", "end_time"})

BELOW_WINDOW_TEMPLATE = "Total time logs ({logged} min) cannot be less than attendance duration ({duration} min)"


def resolve_duration(
    reporting_type: ReportingType,
    *,
    duration: Optional[int],
    start_time: Optional[str],
    end_time: Optional[str],
) -> Tuple[int, Optional[int], Optional[int]]:
    """Effective ``(duration_min, start, end)`` of a time log for its project type."""
    if reporting_type is ReportingType.START_END:
        if not start_time or not end_time:
            raise MissingTimes("Project requires startTime and endTime (reportingType=startEnd)")
        validate_range(start_time, end_time)
        validate_no_midnight_crossing(end_time)
        return duration_minutes(start_time, end_time), parse_time_of_day(start_time), parse_time_of_day(end_time)

    if duration is None:
        raise InvalidDuration("Project requires duration in minutes (reportingType=duration)")
    return validate_duration_positive_integer(duration), None, None


def prepare_allocation(tasks: TaskRepository, draft: AllocationDraft) -> PreparedAllocation:
    """Validate one time log against its task; nothing is written."""
    task = tasks.find_task(draft.task_id)
    if not task:
        raise NotFound("Task not found")

    location = validate_location(draft.location)
    duration_min, start_min, end_min = resolve_duration(
        task.reporting_type,
        duration=draft.duration,
        start_time=draft.start_time,
        end_time=draft.end_time,
    )
    return PreparedAllocation(
        task_id=task.task_id,
        duration_min=duration_min,
        location=location,
        start_time=start_min,
        end_time=end_min,
        description=draft.description or None,
    )


def insert_prepared(tx: TransactionScope, attendance_id: int, prepared: PreparedAllocation) -> int:
    return tx.time_logs.insert(
        attendance_id=attendance_id,
        task_id=prepared.task_id,
        duration_min=prepared.duration_min,
        location=prepared.location,
        start_time=prepared.start_time,
        end_time=prepared.end_time,
        description=prepared.description,
    )


def total_logged(
    tx: TransactionScope,
    attendance_id: int,
    *,
    exclude_id: Optional[int] = None,
    for_update: bool = False,
) -> int:
    return sum(
        log.duration_min
        for log in tx.time_logs.find_by_attendance(attendance_id, for_update=for_update)
        if log.time_log_id != exclude_id
    )


def _format_optional(minutes: Optional[int]) -> Optional[str]:
    return format_time_of_day(minutes) if minutes is not None else None


class TimeLogService:
    """Time logs nested under an attendance window.

    Siblings may overlap in time; only the aggregate rule applies: for a window
    with start and end, the logs must add up to at least its duration.
    """

    def __init__(self, store: Store):
        self._store = store

    def create_allocation(self, attendance_id: int, draft: AllocationDraft) -> int:
        def _create(tx: TransactionScope) -> int:
            if not tx.attendance.find_window(attendance_id, for_update=True):
                raise NotFound("Attendance record not found")
            prepared = prepare_allocation(tx.tasks, draft)
            # Adding a log only grows the total, so the window rule needs no check here.
            return insert_prepared(tx, attendance_id, prepared)

        time_log_id = self._store.run_in_transaction(_create)
        logger.info("Created time log %s under attendance %s", time_log_id, attendance_id)
        return time_log_id

    def update_allocation(self, time_log_id: int, patch: Mapping[str, Any]) -> None:
        unknown = set(patch) - _PATCHABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown time log field(s): {', '.join(sorted(unknown))}")

        def _update(tx: TransactionScope) -> None:
            # Every read in this transaction is a locking read of current rows.
            existing = tx.time_logs.find(time_log_id, for_update=True)
            if not existing:
                raise NotFound("Time log not found")
            window = tx.attendance.find_window(existing.attendance_id, for_update=True)
            if not window:
                raise NotFound("Attendance record not found")

            draft = AllocationDraft(
                task_id=patch.get("task_id", existing.task_id),
                location=patch.get("location", existing.location.value),
                duration=patch.get("duration", existing.duration_min),
                start_time=patch["start_time"] if "start_time" in patch else _format_optional(existing.start_time),
                end_time=patch["end_time"] if "end_time" in patch else _format_optional(existing.end_time),
                description=patch.get("description", existing.description),
            )
            prepared = prepare_allocation(tx.tasks, draft)

            duration_touched = bool(_DURATION_FIELDS.intersection(patch))
            if window.has_times and (duration_touched or prepared.duration_min != existing.duration_min):
                new_total = total_logged(tx, existing.attendance_id, exclude_id=time_log_id, for_update=True)
                new_total += prepared.duration_min
                validate_logs_cover_window(new_total, window.duration, template=BELOW_WINDOW_TEMPLATE)

            tx.time_logs.update(
                time_log_id,
                task_id=prepared.task_id,
                duration_min=prepared.duration_min,
                location=prepared.location,
                start_time=prepared.start_time,
                end_time=prepared.end_time,
                description=prepared.description,
            )

        self._store.run_in_transaction(_update)
        logger.info("Updated time log %s (%s)", time_log_id, ", ".join(sorted(patch)))

    def delete_allocation(self, time_log_id: int) -> None:
        def _delete(tx: TransactionScope) -> None:
            existing = tx.time_logs.find(time_log_id, for_update=True)
            if not existing:
                raise NotFound("Time log not found")
            window = tx.attendance.find_window(existing.attendance_id, for_update=True)
            if window and window.has_times:
                remaining = total_logged(tx, existing.attendance_id, exclude_id=time_log_id, for_update=True)
                validate_logs_cover_window(remaining, window.duration, template=BELOW_WINDOW_TEMPLATE)
            tx.time_logs.delete(time_log_id)

        self._store.run_in_transaction(_delete)
        logger.info("Deleted time log %s", time_log_id)

    def get_allocation(self, time_log_id: int) -> TimeLogAllocation:
        log = self._store.run_in_transaction(lambda tx: tx.time_logs.find(time_log_id))
        if not log:
            raise NotFound("Time log not found")
        return log

    def list_allocations(self, attendance_id: int) -> List[TimeLogAllocation]:
        def _list(tx: TransactionScope) -> List[TimeLogAllocation]:
            if not tx.attendance.find_window(attendance_id):
                raise NotFound("Attendance record not found")
            return list(tx.time_logs.find_by_attendance(attendance_id))

        return self._store.run_in_transaction(_list)

    def total_logged(self, attendance_id: int, *, exclude_id: Optional[int] = None) -> int:
        return self._store.run_in_transaction(lambda tx: total_logged(tx, attendance_id, exclude_id=exclude_id))
