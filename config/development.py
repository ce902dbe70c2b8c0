import os

from config.config import (  # noqa: F401
    ELIGIBILITY_MARGIN_MINUTES,
    FACILITY_TIMEZONE,
    LATE_AFTER_MINUTES,
    RECENT_FETCH_LIMIT,
    _flag,
    db_config,
)

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = db_config(default_password="volunteer")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = _flag("AUTO_INIT_DB", "1")
# Optional: also seed demo data on startup
AUTO_SEED_DB = _flag("AUTO_SEED_DB", "0")
