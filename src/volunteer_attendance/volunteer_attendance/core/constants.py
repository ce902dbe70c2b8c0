"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_FACILITY_TIMEZONE = "Asia/Jerusalem"

# Sessions may be logged from one hour before start until one hour after end.
DEFAULT_ELIGIBILITY_MARGIN_MINUTES = 60
# A session logged more than this long after its start is LATE.
DEFAULT_LATE_AFTER_MINUTES = 60

# Bounded window of recent records fetched per person before in-memory filtering.
DEFAULT_RECENT_FETCH_LIMIT = 200
DEFAULT_FACILITY_REPORT_LIMIT = 500

# Max ids per "session_id IN (...)" lookup.
SESSION_ID_CHUNK_SIZE = 10

DEFAULT_UPCOMING_LIMIT = 3
DEFAULT_SESSION_LABEL = "Volunteer session"
