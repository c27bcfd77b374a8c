from __future__ import annotations

from datetime import datetime, timezone

from flask import Flask, request

from ..common.http import (
    current_user_id,
    domain_error_response,
    json_body,
    login_required,
    ok,
    parse_int,
    rename_keys,
)
from ..common.time_utils import parse_iso_date
from ..core.exceptions import DomainError, ValidationError
from ..container import Container

_PATCH_KEYS = {"startTime": "start_time", "endTime": "end_time"}


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/attendance", methods=["POST"], endpoint="attendance_create")
    @login_required
    def attendance_create():
        try:
            data = json_body()
            try:
                work_date = parse_iso_date(str(data.get("date") or ""))
            except ValueError:
                raise ValidationError("date must be YYYY-MM-DD") from None
            attendance_id = service.create_window(
                user_id=current_user_id(),
                work_date=work_date,
                status=data.get("status"),
                start_time=data.get("startTime"),
                end_time=data.get("endTime"),
            )
            return ok({"id": str(attendance_id)}, 201)
        except DomainError as e:
            return domain_error_response(e)

    @app.route("/api/attendance/<int:attendance_id>", methods=["PUT"], endpoint="attendance_update")
    @login_required
    def attendance_update(attendance_id: int):
        try:
            service.update_window(attendance_id, rename_keys(json_body(), _PATCH_KEYS))
            return ok({"updated": True})
        except DomainError as e:
            return domain_error_response(e)

    @app.route("/api/attendance/<int:attendance_id>", methods=["GET"], endpoint="attendance_get")
    @login_required
    def attendance_get(attendance_id: int):
        try:
            return ok(service.get_window(attendance_id).to_dict())
        except DomainError as e:
            return domain_error_response(e)

    @app.route("/api/attendance/month/<int:month>", methods=["GET"], endpoint="attendance_month")
    @login_required
    def attendance_month(month: int):
        try:
            year_s = request.args.get("year")
            year = parse_int(year_s, "year") if year_s else datetime.now(timezone.utc).year
            rows = service.list_month(current_user_id(), year=year, month=month)
            return ok([r.to_dict() for r in rows])
        except DomainError as e:
            return domain_error_response(e)

    @app.route("/api/attendance/<int:attendance_id>/document", methods=["POST"], endpoint="attendance_document")
    @login_required
    def attendance_document(attendance_id: int):
        try:
            upload = request.files.get("document")
            if upload is None:
                raise ValidationError("No document uploaded")
            service.attach_document(
                attendance_id,
                content=upload.read(),
                content_type=upload.mimetype,
                filename=upload.filename or "",
            )
            return ok({"uploaded": True})
        except DomainError as e:
            return domain_error_response(e)
