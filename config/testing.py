import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "ce_attendance_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

SCHOOL_TIMEZONE = "UTC"

WINDOW_POLICY = "offsets"
CHECKIN_OPEN_BEFORE_MINUTES = 30
CHECKIN_CLOSE_AFTER_MINUTES = 30
CHECKOUT_OPEN_BEFORE_MINUTES = 60
CHECKOUT_CLOSE_AFTER_MINUTES = 60

HEADSHOT_BASE_URL = "https://cdn.example.test/storage/v1/object/public"
HEADSHOT_DIR = ""
SESSION_LIFETIME_DAYS = 7

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
