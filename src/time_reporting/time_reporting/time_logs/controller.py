from __future__ import annotations

from flask import Flask

from ..common.http import domain_error_response, json_body, login_required, ok, parse_int, rename_keys
from ..core.exceptions import DomainError
from ..container import Container
from .model import AllocationDraft

_PATCH_KEYS = {
    "taskId": "task_id",
    "startTime": "start_time",
    "endTime": "end_time",
}


def draft_from_json(data: dict) -> AllocationDraft:
    return AllocationDraft(
        task_id=parse_int(data.get("taskId"), "taskId"),
        location=data.get("location"),
        duration=data.get("duration"),
        start_time=data.get("startTime"),
        end_time=data.get("endTime"),
        description=data.get("description"),
    )


def register(app: Flask, container: Container) -> None:
    service = container.time_log_service

    @app.route("/api/time-logs", methods=["POST"], endpoint="time_logs_create")
    @login_required
    def time_logs_create():
        try:
            data = json_body()
            attendance_id = parse_int(data.get("dailyAttendanceId"), "dailyAttendanceId")
            time_log_id = service.create_allocation(attendance_id, draft_from_json(data))
            return ok({"id": str(time_log_id)}, 201)
        except DomainError as e:
            return domain_error_response(e)

    @app.route("/api/attendance/<int:attendance_id>/time-logs", methods=["GET"], endpoint="time_logs_list")
    @login_required
    def time_logs_list(attendance_id: int):
        try:
            return ok([log.to_dict() for log in service.list_allocations(attendance_id)])
        except DomainError as e:
            return domain_error_response(e)

    @app.route("/api/time-logs/<int:time_log_id>", methods=["PUT"], endpoint="time_logs_update")
    @login_required
    def time_logs_update(time_log_id: int):
        try:
            patch = rename_keys(json_body(), _PATCH_KEYS)
            if "task_id" in patch:
                patch["task_id"] = parse_int(patch["task_id"], "taskId")
            service.update_allocation(time_log_id, patch)
            return ok({"updated": True})
        except DomainError as e:
            return domain_error_response(e)

    @app.route("/api/time-logs/<int:time_log_id>", methods=["DELETE"], endpoint="time_logs_delete")
    @login_required
    def time_logs_delete(time_log_id: int):
        try:
            service.delete_allocation(time_log_id)
            return ok({"deleted": True})
        except DomainError as e:
            return domain_error_response(e)
