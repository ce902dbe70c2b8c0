"""Settings shared by every environment module."""

import os


def _int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def _flag(name: str, default: str = "0") -> bool:
    return bool(int(os.getenv(name, default)))


def db_config(default_password: str = "") -> dict:
    return {
        "host": os.getenv("DB_HOST", "localhost"),
        "port": _int("DB_PORT", 3306),
        "user": os.getenv("DB_USER", "root"),
        "password": os.getenv("DB_PASSWORD", default_password),
        "database": os.getenv("DB_NAME", "volunteer_attendance"),
        # Store calls that exceed this are reported as failed, never assumed done.
        "connection_timeout": _int("DB_CONNECT_TIMEOUT", 10),
    }


FACILITY_TIMEZONE = os.getenv("FACILITY_TIMEZONE", "Asia/Jerusalem")
ELIGIBILITY_MARGIN_MINUTES = _int("ELIGIBILITY_MARGIN_MINUTES", 60)
LATE_AFTER_MINUTES = _int("LATE_AFTER_MINUTES", 60)
RECENT_FETCH_LIMIT = _int("RECENT_FETCH_LIMIT", 200)
