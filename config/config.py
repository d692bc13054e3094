"""Settings shared by every environment; environment modules override what differs."""

import os

SECRET_KEY = os.environ.get("SECRET_KEY") or "change-me"
JWT_SECRET = os.environ.get("JWT_SECRET") or SECRET_KEY
JWT_TTL_HOURS = float(os.environ.get("JWT_TTL_HOURS", "8"))

DB_CONFIG = {
    "host": os.environ.get("DB_HOST", "localhost"),
    "port": int(os.environ.get("DB_PORT", "3306")),
    "user": os.environ.get("DB_USER", "root"),
    "password": os.environ.get("DB_PASSWORD", ""),
    "database": os.environ.get("DB_NAME", "qr_attendance"),
}

DEBUG = bool(int(os.environ.get("DEBUG", "0")))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

# Dev helpers
AUTO_INIT_DB = bool(int(os.environ.get("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.environ.get("AUTO_SEED_DB", "0")))

DEFAULT_SESSION_MINUTES = float(os.environ.get("DEFAULT_SESSION_MINUTES", "15"))
DEFAULT_STUDENT_PASSWORD = os.environ.get("DEFAULT_STUDENT_PASSWORD", "student123")
DEFAULT_TEACHER_PASSWORD = os.environ.get("DEFAULT_TEACHER_PASSWORD", "teacher123")

ADMIN_USERNAME = os.environ.get("ADMIN_USERNAME", "admin")
ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD", "admin123")
