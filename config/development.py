import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "ce_attendance"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Wall-clock zone for instructor-entered session times without an offset
SCHOOL_TIMEZONE = os.getenv("SCHOOL_TIMEZONE", "America/Chicago")

# 'offsets' recomputes windows around start/end; 'fixed_expiry' stamps expiries at creation
WINDOW_POLICY = os.getenv("WINDOW_POLICY", "offsets")
CHECKIN_OPEN_BEFORE_MINUTES = int(os.getenv("CHECKIN_OPEN_BEFORE_MINUTES", "30"))
CHECKIN_CLOSE_AFTER_MINUTES = int(os.getenv("CHECKIN_CLOSE_AFTER_MINUTES", "30"))
CHECKOUT_OPEN_BEFORE_MINUTES = int(os.getenv("CHECKOUT_OPEN_BEFORE_MINUTES", "60"))
CHECKOUT_CLOSE_AFTER_MINUTES = int(os.getenv("CHECKOUT_CLOSE_AFTER_MINUTES", "60"))

HEADSHOT_BASE_URL = os.getenv("HEADSHOT_BASE_URL", "/media")
# Uploaded headshots are written here and served under /media
_REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
HEADSHOT_DIR = os.getenv("HEADSHOT_DIR", os.path.join(_REPO_ROOT, "instance", "media"))
SESSION_LIFETIME_DAYS = int(os.getenv("SESSION_LIFETIME_DAYS", "7"))

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also create the demo admin on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
SEED_ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@example.com")
SEED_ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "admin123")
