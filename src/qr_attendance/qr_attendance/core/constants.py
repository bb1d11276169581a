"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_ORG_TIMEZONE = "America/Chicago"
DEFAULT_LATE_GRACE_MINUTES = 15
DEFAULT_EXPECTED_START = "09:00"
DEFAULT_CATEGORY = "general"

MIN_HOURS_WORKED = 0.1
MAX_HOURS_WORKED = 24.0

DEFAULT_STORE_RETRIES = 3
DEFAULT_STORE_TIMEOUT_SECONDS = 5

DATE_FORMAT = "%Y-%m-%d"
