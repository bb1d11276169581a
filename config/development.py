import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# "mysql" or "memory" (process-local, lost on restart)
STORE_BACKEND = os.getenv("STORE_BACKEND", "mysql")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "qr_attendance"),
}

# One store request (and its row locks) must finish within this bound
STORE_TIMEOUT_SECONDS = int(os.getenv("STORE_TIMEOUT_SECONDS", "5"))
STORE_RETRIES = int(os.getenv("STORE_RETRIES", "3"))

ORG_TIMEZONE = os.getenv("ORG_TIMEZONE", "America/Chicago")
LATE_GRACE_MINUTES = int(os.getenv("LATE_GRACE_MINUTES", "15"))
DEFAULT_EXPECTED_START = os.getenv("DEFAULT_EXPECTED_START", "09:00")
EXPECTED_START_BY_CATEGORY = {}
DEFAULT_CATEGORY = "general"

# Empty means the built-in rules (orange: haciendas 95; green: + workshops 60; blue: + meetings 100)
PADRINO_THRESHOLDS = {}
PADRINO_VACUOUS_CATEGORIES = []

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
