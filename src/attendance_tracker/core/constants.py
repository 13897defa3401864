"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

DEFAULT_TIMEZONE = "UTC"
DEFAULT_SHIFT_START = time(9, 0)
DEFAULT_GRACE_MINUTES = 15
DEFAULT_OVERTIME_THRESHOLD_HOURS = 8.0
DEFAULT_AUTO_CLOCK_OUT_TIME = time(23, 59)

DEFAULT_GEO_TIMEOUT_SECONDS = 10.0
DEFAULT_GEO_ACCURACY_THRESHOLD_M = 100.0
# Tolerated skew between the client clock stamping a fix and ours.
GEO_FRESHNESS_TOLERANCE_SECONDS = 5.0

DUPLICATE_CLEANUP_REASON = "duplicate-cleanup"
SYSTEM_EDITOR = "system"
AUTO_CLOCK_OUT_NOTE = "Auto clock out"

MAX_NOTE_LENGTH = 500
TEMP_ID_PREFIX = "temp_"
