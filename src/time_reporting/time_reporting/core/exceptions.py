from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations.

    ``code`` identifies the kind of failure for the transport layer. ``index``
    is set when the error belongs to one entry of a multi-entry request
    (1-based).
    """

    code = "DOMAIN_ERROR"

    def __init__(self, message: str = "", *, index: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.index = index

    def at_index(self, index: int) -> "DomainError":
        """Same error, re-targeted at the ``index``-th entry of a request."""
        return type(self)(f"Time log #{index}: {self.message}", index=index)


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "VALIDATION_ERROR"


class NotFound(DomainError):
    code = "NOT_FOUND"


class InvalidFormat(ValidationError):
    code = "INVALID_FORMAT"


class InvalidRange(ValidationError):
    code = "INVALID_RANGE"


class InvalidDuration(ValidationError):
    code = "INVALID_DURATION"


class InvalidLocation(ValidationError):
    code = "INVALID_LOCATION"


class MissingTimes(ValidationError):
    code = "MISSING_TIMES"


class ExclusiveStatusConflict(ValidationError):
    code = "EXCLUSIVE_STATUS_CONFLICT"


class OverlapConflict(ValidationError):
    code = "OVERLAP_CONFLICT"


class DurationBelowLogs(ValidationError):
    code = "DURATION_BELOW_LOGS"


class ImmutableField(ValidationError):
    code = "IMMUTABLE_FIELD"


class StatusChangeBlocked(ValidationError):
    """Raised when leaving ``work`` status while time logs still exist."""

    code = "STATUS_CHANGE_BLOCKED"


class DocumentNotAllowed(ValidationError):
    code = "DOCUMENT_NOT_ALLOWED"
