"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import timedelta

DEFAULT_HISTORY_LIMIT = 30
DEFAULT_LIST_LIMIT = 200
DEFAULT_STATS_DAYS = 7

# date.weekday(): Monday=0 ... Sunday=6
DEFAULT_WEEKLY_OFF_DAY = 6

DEFAULT_APPROVER_ROLES = ("hr", "hod")
DEFAULT_UNACCOUNTED_LEAVE_TYPES = ("LWP", "VACATION")
DEFAULT_CLEARANCE_DEPARTMENTS = ("Reporting Manager", "IT", "Finance", "Admin", "HR")

DEFAULT_STORE_RETRY_ATTEMPTS = 3
STORE_RETRY_BASE_DELAY = timedelta(milliseconds=50)
STORE_RETRY_MAX_DELAY = timedelta(seconds=1)
