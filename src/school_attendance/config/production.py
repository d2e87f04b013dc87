import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "school_attendance"),
}

STORE_BACKEND = os.getenv("STORE_BACKEND", "mysql")

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

SCHOOL_TIMEZONE = os.getenv("SCHOOL_TIMEZONE", "")

CHECKIN_START = os.getenv("CHECKIN_START", "07:00")
CHECKIN_END = os.getenv("CHECKIN_END", "08:00")
LATE_THRESHOLD = os.getenv("LATE_THRESHOLD", "08:00")
CHECKOUT_START = os.getenv("CHECKOUT_START", "14:30")
CHECKOUT_END = os.getenv("CHECKOUT_END", "14:40")

PAGE_SIZE = int(os.getenv("PAGE_SIZE", "5"))
SHOW_ALL_LIMIT = int(os.getenv("SHOW_ALL_LIMIT", "100"))

# Per-viewer attendance views are released after this many idle seconds
PROJECTION_IDLE_TTL = int(os.getenv("PROJECTION_IDLE_TTL", "1800"))
PROJECTION_MAX_VIEWS = int(os.getenv("PROJECTION_MAX_VIEWS", "200"))
REPORT_MAX_ROWS = int(os.getenv("REPORT_MAX_ROWS", "5000"))

PUSH_ENDPOINT = os.getenv("PUSH_ENDPOINT", "")
PUSH_SERVER_KEY = os.getenv("PUSH_SERVER_KEY", "")
