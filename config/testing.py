import os

SECRET_KEY = "test-secret"

STORAGE_BACKEND = "memory"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_dashboard_test"),
}

STORAGE_QUOTA_BYTES = None
SIMULATED_LATENCY_MS = (0, 0)
FIXTURE_PATH = None
# Fast hashing keeps the suite quick.
PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"

LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")
DEBUG = False
TESTING = True

AUTO_INIT_DB = False
