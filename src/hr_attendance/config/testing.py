import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hr_attendance_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False

# The sweep thread never runs under tests; tests call the sweep directly.
AUTO_CHECKOUT_ENABLED = False
AUTO_CHECKOUT_HOURS = 11
AUTO_CHECKOUT_INTERVAL_SECONDS = 600

ENFORCE_CHECK_IN_WINDOW = False
