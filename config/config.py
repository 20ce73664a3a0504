"""Settings shared by every environment module."""

import os


def _csv(value: str) -> tuple:
    return tuple(p.strip() for p in value.split(",") if p.strip())


def db_config(default_password: str = "") -> dict:
    return {
        "host": os.getenv("DB_HOST", "localhost"),
        "port": int(os.getenv("DB_PORT", "3306")),
        "user": os.getenv("DB_USER", "root"),
        "password": os.getenv("DB_PASSWORD", default_password),
        "database": os.getenv("DB_NAME", "campus_attendance"),
        "connect_timeout": int(os.getenv("DB_CONNECT_TIMEOUT", "10")),
        "lock_wait_timeout": int(os.getenv("DB_LOCK_WAIT_TIMEOUT", "5")),
        "statement_timeout_ms": int(os.getenv("DB_STATEMENT_TIMEOUT_MS", "10000")),
    }


# Attendance and payroll rules
GRACE_PERIOD_MINUTES = int(os.getenv("GRACE_PERIOD_MINUTES", "15"))
LATE_RATE_PER_MINUTE = os.getenv("LATE_RATE_PER_MINUTE", "1.00")
ABSENCE_RATE_PER_DAY = os.getenv("ABSENCE_RATE_PER_DAY", "240.00")
OVERTIME_BONUS = os.getenv("OVERTIME_BONUS", "200.00")

# Requester positions whose gate passes and leaves go through the Dean
DEAN_APPROVAL_POSITIONS = _csv(os.getenv("DEAN_APPROVAL_POSITIONS", "Program Head,Full Time,Part Time"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
