from __future__ import annotations

from enum import Enum


class AttendanceKind(str, Enum):
    """What an attendance record is about."""

    SESSION = "session"
    FACILITY = "facility"


class AttendanceOutcome(str, Enum):
    """Outcome stored on a record.

    ABSENT is part of the taxonomy but only a manual workflow sets it.
    """

    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"


class ConfirmationSource(str, Enum):
    VOLUNTEER = "volunteer"
    MANAGER = "manager"


class SessionStatus(str, Enum):
    """Lifecycle of a scheduled session."""

    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELED = "canceled"


class SmartAction(str, Enum):
    """What a smart log invocation ended up doing."""

    SESSIONS_LOGGED = "sessions_logged"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"


class VisitReportMode(str, Enum):
    ACTIVE = "active"
    DATE = "date"
