"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_MINUTES = 15
MILLIS_PER_MINUTE = 60 * 1000
DEFAULT_ACCESS_TOKEN_HOURS = 8
DEFAULT_STUDENT_PASSWORD = "student123"
DEFAULT_TEACHER_PASSWORD = "teacher123"
STUDENT_EMAIL_DOMAIN = "students.example.com"
TEACHER_EMAIL_DOMAIN = "gmail.com"
MYSQL_DUPLICATE_KEY_ERRNO = 1062
# One week; longer requests are clamped.
MAX_SESSION_MINUTES = 7 * 24 * 60
# class_sessions.expiry_ms is a signed BIGINT.
MAX_EXPIRY_MS = 2**63 - 1
