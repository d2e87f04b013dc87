SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": "localhost",
    "port": 3306,
    "user": "root",
    "password": "",
    "database": "school_attendance_test",
}

STORE_BACKEND = "memory"

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False
AUTO_SEED_DB = False

SCHOOL_TIMEZONE = ""

CHECKIN_START = "07:00"
CHECKIN_END = "08:00"
LATE_THRESHOLD = "08:00"
CHECKOUT_START = "14:30"
CHECKOUT_END = "14:40"

PAGE_SIZE = 5
SHOW_ALL_LIMIT = 100
PROJECTION_IDLE_TTL = 1800
PROJECTION_MAX_VIEWS = 200
REPORT_MAX_ROWS = 5000

PUSH_ENDPOINT = ""
PUSH_SERVER_KEY = ""
