"""Helpers shared by the JSON controllers."""
from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Mapping, Optional

from flask import jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.exceptions import DomainError, NotFound, ValidationError

logger = logging.getLogger(__name__)


def ok(data: Any = None, status: int = 200):
    return jsonify({"success": True, "data": data}), status


def error(code: str, message: str, status: int, *, index: Optional[int] = None):
    body = {"code": code, "message": message}
    if index is not None:
        body["index"] = index
    return jsonify({"success": False, "error": body}), status


def domain_error_response(exc: DomainError):
    status = 404 if isinstance(exc, NotFound) else 400
    logger.debug("Rejected %s %s: %s", request.method, request.path, exc)
    return error(exc.code, exc.message, status, index=exc.index)


def unexpected_error_response(exc: Exception):
    """App-wide handler: HTTP errors pass through, anything else is a JSON 500."""
    if isinstance(exc, HTTPException):
        return exc
    logger.exception("Unhandled error on %s %s", request.method, request.path)
    return error("INTERNAL_ERROR", "Internal server error", 500)


def login_required(view):
    """The auth layer stores the authenticated ``user_id`` in the session."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return error("UNAUTHORIZED", "Authentication required", 401)
        return view(*args, **kwargs)

    return wrapper


def current_user_id() -> int:
    return int(session["user_id"])


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def parse_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} is invalid")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is invalid") from None


def rename_keys(data: Mapping[str, Any], mapping: Mapping[str, str]) -> dict:
    """camelCase request keys -> service field names; unknown keys kept as-is."""
    return {mapping.get(key, key): value for key, value in data.items()}
