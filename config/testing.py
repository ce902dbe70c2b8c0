from config.config import (  # noqa: F401
    ELIGIBILITY_MARGIN_MINUTES,
    FACILITY_TIMEZONE,
    LATE_AFTER_MINUTES,
    RECENT_FETCH_LIMIT,
    db_config,
)

SECRET_KEY = "test-secret"

DB_CONFIG = db_config(default_password="12345")

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False
AUTO_SEED_DB = False
