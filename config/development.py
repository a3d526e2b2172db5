import os

from config import latency_range, optional_int

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

# memory | mysql
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "memory")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_dashboard"),
}

# Browser local storage is about 5 MB per origin.
STORAGE_QUOTA_BYTES = optional_int(os.getenv("STORAGE_QUOTA_BYTES", "5242880"))
SIMULATED_LATENCY_MS = latency_range(os.getenv("SIMULATED_LATENCY_MS", "50,200"))
FIXTURE_PATH = os.getenv("FIXTURE_PATH") or None
PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "scrypt")

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
DEBUG = True

# If enabled, app applies storage/schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
