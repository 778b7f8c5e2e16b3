import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "ce_attendance"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

SCHOOL_TIMEZONE = os.getenv("SCHOOL_TIMEZONE", "America/Chicago")

WINDOW_POLICY = os.getenv("WINDOW_POLICY", "offsets")
CHECKIN_OPEN_BEFORE_MINUTES = int(os.getenv("CHECKIN_OPEN_BEFORE_MINUTES", "30"))
CHECKIN_CLOSE_AFTER_MINUTES = int(os.getenv("CHECKIN_CLOSE_AFTER_MINUTES", "30"))
CHECKOUT_OPEN_BEFORE_MINUTES = int(os.getenv("CHECKOUT_OPEN_BEFORE_MINUTES", "60"))
CHECKOUT_CLOSE_AFTER_MINUTES = int(os.getenv("CHECKOUT_CLOSE_AFTER_MINUTES", "60"))

HEADSHOT_BASE_URL = os.getenv("HEADSHOT_BASE_URL", "")
HEADSHOT_DIR = os.getenv("HEADSHOT_DIR", "")
SESSION_LIFETIME_DAYS = int(os.getenv("SESSION_LIFETIME_DAYS", "7"))

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
SEED_ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "")
SEED_ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "")
