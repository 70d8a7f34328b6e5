"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_HISTORY_LIMIT = 30
DEFAULT_AUDIT_LOG_LIMIT = 100
MAX_AUDIT_LOG_LIMIT = 1000

AUDIT_ACTION_UPDATE_ATTENDANCE = "update_attendance"

# Fields an administrator may overwrite directly.
OVERRIDABLE_TIME_FIELDS = ("clock_in_time", "clock_out_time")
OVERRIDABLE_MINUTE_FIELDS = ("total_work_minutes", "total_break_minutes")
OVERRIDABLE_FIELDS = OVERRIDABLE_TIME_FIELDS + OVERRIDABLE_MINUTE_FIELDS
