"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

DEFAULT_PAGE_SIZE = 5
SHOW_ALL_LIMIT = 100
REPORT_MAX_ROWS = 5000

CHECKIN_WINDOW_START = time(7, 0, 0)
CHECKIN_WINDOW_END = time(8, 0, 0)
LATE_THRESHOLD = time(8, 0, 0)

CHECKOUT_WINDOW_START = time(14, 30, 0)
CHECKOUT_WINDOW_END = time(14, 40, 0)

ATTENDANCE_COLLECTION = "attendance"
ANNOUNCEMENTS_COLLECTION = "announcements"
USERS_COLLECTION = "users"

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M:%S"
