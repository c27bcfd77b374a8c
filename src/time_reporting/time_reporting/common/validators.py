from __future__ import annotations

from pathlib import PurePath

from ..core.constants import ALLOWED_DOCUMENT_EXTENSIONS, ALLOWED_DOCUMENT_TYPES, LAST_MINUTE_OF_DAY, MAX_DOCUMENT_BYTES
from ..core.enums import Location
from ..core.exceptions import DurationBelowLogs, InvalidDuration, InvalidLocation, InvalidRange, ValidationError
from .time_utils import duration_minutes, parse_time_of_day


def validate_range(start: str, end: str) -> None:
    """End must be strictly after start (zero-length and reversed rejected)."""
    if duration_minutes(start, end) <= 0:
        raise InvalidRange("End time must be after start time")


def validate_no_midnight_crossing(end: str) -> None:
    if parse_time_of_day(end) > LAST_MINUTE_OF_DAY:
        raise InvalidRange("End time cannot exceed 23:59 (no overnight shifts allowed)")


def validate_location(location: str) -> Location:
    # Location is a str-Enum; compare on the raw value so "Office" is rejected.
    for candidate in Location:
        if location == candidate.value:
            return candidate
    allowed = ", ".join(loc.value for loc in Location)
    raise InvalidLocation(f"Location must be one of: {allowed}")


def validate_duration_positive_integer(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidDuration("Duration must be a positive integer (minutes)")
    return value


def validate_logs_cover_window(total_logged: int, window_duration: int, *, template: str) -> None:
    """Sum of time logs must be >= the attendance duration.

    ``template`` is formatted with ``logged`` and ``duration``.
    """
    if total_logged < window_duration:
        raise DurationBelowLogs(template.format(logged=total_logged, duration=window_duration))


def validate_document(content: bytes, *, content_type: str, filename: str, max_bytes: int = MAX_DOCUMENT_BYTES) -> None:
    if not content:
        raise ValidationError("Document is empty")
    if (content_type or "").lower() not in ALLOWED_DOCUMENT_TYPES:
        raise ValidationError(f"Invalid file type. Allowed types: JPG, PNG, PDF (received: {content_type})")
    if PurePath((filename or "").lower()).suffix not in ALLOWED_DOCUMENT_EXTENSIONS:
        raise ValidationError(
            f"Invalid file extension. Allowed extensions: {', '.join(ALLOWED_DOCUMENT_EXTENSIONS)}"
        )
    if len(content) > max_bytes:
        size_mb = len(content) / (1024 * 1024)
        raise ValidationError(f"File size exceeds maximum limit of {max_bytes // (1024 * 1024)}MB (received: {size_mb:.2f}MB)")
