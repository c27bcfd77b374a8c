"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

MINUTES_PER_DAY = 1440
LAST_MINUTE_OF_DAY = MINUTES_PER_DAY - 1  # 23:59

TIME_OF_DAY_FORMAT = "HH:mm"

MAX_DOCUMENT_BYTES = 5 * 1024 * 1024
ALLOWED_DOCUMENT_TYPES = ("image/jpeg", "image/jpg", "image/png", "application/pdf")
ALLOWED_DOCUMENT_EXTENSIONS = (".jpg", ".jpeg", ".png", ".pdf")

DEFAULT_ISOLATION_LEVEL = "REPEATABLE READ"
