from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..core.enums import SmartAction
from .model import SmartLogResult
from .presence import PresenceResolver
from .service import AttendanceService

logger = logging.getLogger(__name__)


class AttendanceReconciler:
    """Single "smart log" entry point.

    Logs any session that is eligible now and not yet logged; otherwise toggles
    facility presence. Under normal conditions a call always either writes a
    session record or flips check-in state.
    """

    def __init__(self, presence: PresenceResolver, writer: AttendanceService):
        self._presence = presence
        self._writer = writer

    def smart_log(self, person_id: str, *, now: Optional[datetime] = None) -> SmartLogResult:
        now = self._presence.now(now)
        person = self._presence.require_person(person_id)

        pending = self._presence.pending_sessions(person.person_id, now=now)
        if pending:
            logged = self._writer.log_sessions(person.person_id, pending, now=now)
            return SmartLogResult(
                action=SmartAction.SESSIONS_LOGGED,
                logged_count=logged.logged_count,
                any_late=logged.any_late,
                snapshot=self._presence.snapshot(person.person_id, now=now),
            )

        if self._presence.open_facility_record(person.person_id, now=now):
            record = self._writer.check_out(person.person_id, now=now)
            action = SmartAction.CHECKED_OUT
        else:
            record = self._writer.check_in(person.person_id, now=now)
            action = SmartAction.CHECKED_IN

        logger.debug("Smart log for %s fell back to %s", person.person_id, action.value)
        return SmartLogResult(
            action=action,
            record=record,
            snapshot=self._presence.snapshot(person.person_id, now=now),
        )
