"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from .enums import LeaveType

DEFAULT_GRACE_MINUTES = 15
MAX_GRACE_MINUTES = 60
DEFAULT_MINIMUM_HOURS = 8

# Earliest tolerated check-in, relative to shift start.
CHECK_IN_EARLY_TOLERANCE_HOURS = 1

# Timestamps before this hour belong to the previous day's cross-midnight shift.
CROSS_MIDNIGHT_SPLIT_HOUR = 12

AUTO_CHECKOUT_HOURS = 11
AUTO_CHECKOUT_INTERVAL_SECONDS = 600

MONTHLY_LEAVE_ALLOCATION = {
    LeaveType.CASUAL: 1,
    LeaveType.SICK: 1,
}

LEAVE_ATTENDANCE_REMARK = "Auto-marked due to approved leave"

DEFAULT_HISTORY_LIMIT = 31
DEFAULT_PAGE_SIZE = 10
