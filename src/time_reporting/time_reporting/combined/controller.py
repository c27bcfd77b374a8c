from __future__ import annotations

from flask import Flask

from ..common.http import current_user_id, domain_error_response, json_body, login_required, ok
from ..common.time_utils import parse_iso_date
from ..core.exceptions import DomainError, ValidationError
from ..container import Container
from ..time_logs.controller import draft_from_json


def register(app: Flask, container: Container) -> None:
    service = container.combined_service

    @app.route("/api/attendance/combined", methods=["POST"], endpoint="attendance_combined")
    @login_required
    def attendance_combined():
        try:
            data = json_body()
            try:
                work_date = parse_iso_date(str(data.get("date") or ""))
            except ValueError:
                raise ValidationError("date must be YYYY-MM-DD") from None
            raw_logs = data.get("timeLogs") or []
            if not isinstance(raw_logs, list):
                raise ValidationError("timeLogs must be a list")

            drafts = []
            for index, raw in enumerate(raw_logs, start=1):
                if not isinstance(raw, dict):
                    raise ValidationError(f"Time log #{index}: must be an object", index=index)
                try:
                    drafts.append(draft_from_json(raw))
                except DomainError as exc:
                    raise exc.at_index(index) from exc

            result = service.create_combined(
                user_id=current_user_id(),
                work_date=work_date,
                start_time=data.get("startTime"),
                end_time=data.get("endTime"),
                time_logs=drafts,
            )
            return ok(result.to_dict(), 201)
        except DomainError as e:
            return domain_error_response(e)
