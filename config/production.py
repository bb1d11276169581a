import json
import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

STORE_BACKEND = os.getenv("STORE_BACKEND", "mysql")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "qr_attendance"),
}

STORE_TIMEOUT_SECONDS = int(os.getenv("STORE_TIMEOUT_SECONDS", "5"))
STORE_RETRIES = int(os.getenv("STORE_RETRIES", "3"))

ORG_TIMEZONE = os.getenv("ORG_TIMEZONE", "America/Chicago")
LATE_GRACE_MINUTES = int(os.getenv("LATE_GRACE_MINUTES", "15"))
DEFAULT_EXPECTED_START = os.getenv("DEFAULT_EXPECTED_START", "09:00")
# JSON, e.g. {"workshops": "10:00"}
EXPECTED_START_BY_CATEGORY = json.loads(os.getenv("EXPECTED_START_BY_CATEGORY", "{}"))
DEFAULT_CATEGORY = os.getenv("DEFAULT_CATEGORY", "general")

# JSON, e.g. {"orange": {"haciendas": 95}, "green": {"haciendas": 95, "workshops": 60}}
PADRINO_THRESHOLDS = json.loads(os.getenv("PADRINO_THRESHOLDS", "{}"))
PADRINO_VACUOUS_CATEGORIES = [c for c in os.getenv("PADRINO_VACUOUS_CATEGORIES", "").split(",") if c.strip()]

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
