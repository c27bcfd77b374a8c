from __future__ import annotations

import logging
from datetime import date
from typing import List, Sequence

from ..attendance.service import check_exclusivity, check_overlap
from ..common.time_utils import duration_minutes, parse_time_of_day
from ..common.validators import validate_logs_cover_window, validate_no_midnight_crossing, validate_range
from ..core.enums import AttendanceStatus
from ..core.exceptions import DomainError
from ..database.store import Store, TransactionScope
from ..time_logs.model import AllocationDraft, PreparedAllocation
from ..time_logs.service import insert_prepared, prepare_allocation
from .model import CombinedResult

logger = logging.getLogger(__name__)


class CombinedAttendanceService:
    """Create a work attendance window and its time logs all-or-nothing."""

    def __init__(self, store: Store):
        self._store = store

    def create_combined(
        self,
        *,
        user_id: int,
        work_date: date,
        start_time: str,
        end_time: str,
        time_logs: Sequence[AllocationDraft],
    ) -> CombinedResult:
        # Pure checks first: nothing below touches storage until they pass.
        validate_range(start_time, end_time)
        validate_no_midnight_crossing(end_time)
        target_duration = duration_minutes(start_time, end_time)
        start_min = parse_time_of_day(start_time)
        end_min = parse_time_of_day(end_time)

        def _create(tx: TransactionScope) -> CombinedResult:
            existing = tx.attendance.find_windows(user_id, work_date, for_update=True)
            check_exclusivity(existing, AttendanceStatus.WORK)
            check_overlap(existing, start_min, end_min)

            prepared: List[PreparedAllocation] = []
            for index, draft in enumerate(time_logs, start=1):
                try:
                    prepared.append(prepare_allocation(tx.tasks, draft))
                except DomainError as exc:
                    raise exc.at_index(index) from exc

            total = sum(p.duration_min for p in prepared)
            validate_logs_cover_window(
                total,
                target_duration,
                template="Total time logs ({logged} min) must be >= attendance duration ({duration} min)",
            )

            attendance_id = tx.attendance.insert_window(
                user_id=user_id,
                work_date=work_date,
                status=AttendanceStatus.WORK,
                start_time=start_min,
                end_time=end_min,
            )
            time_log_ids = tuple(insert_prepared(tx, attendance_id, p) for p in prepared)
            return CombinedResult(attendance_id=attendance_id, time_log_ids=time_log_ids)

        result = self._store.run_in_transaction(_create)
        logger.info(
            "Created attendance %s with %d time logs for user %s on %s",
            result.attendance_id,
            len(result.time_log_ids),
            user_id,
            work_date,
        )
        return result
