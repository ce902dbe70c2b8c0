import os

from config.config import (  # noqa: F401
    ELIGIBILITY_MARGIN_MINUTES,
    FACILITY_TIMEZONE,
    LATE_AFTER_MINUTES,
    RECENT_FETCH_LIMIT,
    _flag,
    db_config,
)

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = db_config()

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = _flag("AUTO_INIT_DB")
AUTO_SEED_DB = _flag("AUTO_SEED_DB")
