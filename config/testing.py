SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

STORE_BACKEND = "memory"
DB_CONFIG = {}

STORE_TIMEOUT_SECONDS = 1
STORE_RETRIES = 3

ORG_TIMEZONE = "America/Chicago"
LATE_GRACE_MINUTES = 15
DEFAULT_EXPECTED_START = "09:00"
EXPECTED_START_BY_CATEGORY = {}
DEFAULT_CATEGORY = "general"

PADRINO_THRESHOLDS = {}
PADRINO_VACUOUS_CATEGORIES = []

AUTO_INIT_DB = False
