from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, time
from typing import Optional

from ..common.datetime_utils import Clock, local_date_str, parse_iso_date, to_local
from ..common.validators import require_non_empty, require_positive
from ..core.constants import DEFAULT_RECENT_FETCH_LIMIT, DEFAULT_SESSION_LABEL, DEFAULT_UPCOMING_LIMIT
from ..core.enums import SessionStatus
from ..core.exceptions import DataIntegrityWarning, UnknownPerson
from ..people.model import Person, ScheduledSession
from ..people.repository import PersonDirectory
from ..sessions.repository import SessionCatalog
from .model import AttendanceRecord, PresenceSnapshot
from .repository import AttendanceRepository
from .windows import TimeWindowEvaluator

logger = logging.getLogger(__name__)


def _confirmed_key(record: AttendanceRecord) -> datetime:
    return record.confirmed_at


class PresenceResolver:
    """Reads attendance evidence for a person and derives where they stand.

    Only single-field reads reach the repository; all cross-field filtering
    (kind, date, open visit, person) happens here in memory.
    Store failures propagate as TransientIOError instead of reading as "absent".
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        people: PersonDirectory,
        evaluator: TimeWindowEvaluator,
        clock: Clock,
        *,
        sessions: Optional[SessionCatalog] = None,
        recent_limit: int = DEFAULT_RECENT_FETCH_LIMIT,
    ):
        self._attendance = attendance
        self._people = people
        self._evaluator = evaluator
        self._clock = clock
        self._sessions = sessions
        self._recent_limit = require_positive(recent_limit, "recent_limit")

    @property
    def evaluator(self) -> TimeWindowEvaluator:
        return self._evaluator

    def now(self, now: Optional[datetime] = None) -> datetime:
        return to_local(now or self._clock.now(), self._evaluator.tz)

    def today(self, now: Optional[datetime] = None) -> str:
        return local_date_str(self.now(now), self._evaluator.tz)

    def require_person(self, person_id: str) -> Person:
        person_id = require_non_empty(person_id, "person_id")
        person = self._people.get_person(person_id)
        if not person:
            raise UnknownPerson(f"Unknown volunteer: {person_id}")
        return person

    def snapshot(self, person_id: str, *, now: Optional[datetime] = None) -> PresenceSnapshot:
        person = self.require_person(person_id)
        now = self.now(now)

        open_record = self.open_facility_record(person.person_id, now=now)
        session_records = self.session_records_today(person, now=now)
        earliest = min((r.confirmed_at for r in session_records), default=None)

        return PresenceSnapshot(
            person_id=person.person_id,
            checked_in=open_record is not None,
            open_record=open_record,
            has_joined_today=bool(session_records),
            earliest_confirmation=earliest,
            session_records=tuple(session_records),
        )

    def open_facility_record(self, person_id: str, *, now: Optional[datetime] = None) -> Optional[AttendanceRecord]:
        today = self.today(now)
        recent = self._attendance.list_recent_for_person(person_id, self._recent_limit)
        open_records = [r for r in recent if r.is_open_visit and r.date == today]
        if not open_records:
            return None

        open_records.sort(key=_confirmed_key, reverse=True)
        if len(open_records) > 1:
            warning = DataIntegrityWarning(
                f"{len(open_records)} open facility records for {person_id} on {today}; "
                f"using #{open_records[0].attendance_id}, ignoring "
                + ", ".join(f"#{r.attendance_id}" for r in open_records[1:])
            )
            logger.warning("%s", warning)
        return open_records[0]

    def session_records_today(self, person: Person | str, *, now: Optional[datetime] = None) -> list[AttendanceRecord]:
        person_id = person.person_id if isinstance(person, Person) else person
        ids = [s.session_id for s in self.todays_sessions(person, now=now, include_canceled=True)]
        if not ids:
            return []
        records = self._attendance.list_for_person_sessions(person_id, ids)
        return [r for r in records if r.person_id == person_id and r.session_id in ids]

    def todays_sessions(
        self,
        person: Person | str,
        *,
        now: Optional[datetime] = None,
        include_canceled: bool = False,
    ) -> list[ScheduledSession]:
        person_id = person.person_id if isinstance(person, Person) else person
        today = self.today(now)
        out: list[ScheduledSession] = []
        for s in self._people.scheduled_sessions(person_id):
            if s.date != today or not s.session_id:
                continue
            if s.status == SessionStatus.CANCELED and not include_canceled:
                continue
            out.append(self._enrich(s))
        return out

    def pending_sessions(self, person_id: str, *, now: Optional[datetime] = None) -> list[ScheduledSession]:
        """Today's sessions eligible right now that have no record yet."""

        now = self.now(now)
        eligible = self._evaluator.eligible(self.todays_sessions(person_id, now=now), now)
        if not eligible:
            return []

        existing = self._attendance.list_for_person_sessions(person_id, [s.session_id for s in eligible])
        logged = {r.session_id for r in existing if r.person_id == person_id}
        return [s for s in eligible if s.session_id not in logged]

    def upcoming_sessions(
        self,
        person_id: str,
        *,
        now: Optional[datetime] = None,
        limit: int = DEFAULT_UPCOMING_LIMIT,
    ) -> list[ScheduledSession]:
        now = self.now(now)
        today = now.date()
        upcoming: list[tuple[datetime, ScheduledSession]] = []

        for s in self._people.scheduled_sessions(person_id):
            if s.status in (SessionStatus.COMPLETED, SessionStatus.CANCELED):
                continue
            try:
                day = parse_iso_date(s.date)
            except (TypeError, ValueError):
                continue
            if day < today:
                continue
            s = self._enrich(s)
            start = self._evaluator.session_start(s)
            if day == today and start is not None and start <= now:
                continue
            # Unknown start sorts at the beginning of its day.
            upcoming.append((start or datetime.combine(day, time.min, tzinfo=self._evaluator.tz), s))

        upcoming.sort(key=lambda pair: pair[0])
        return [s for _, s in upcoming[: int(limit)]]

    def _enrich(self, session: ScheduledSession) -> ScheduledSession:
        if session.start_time and session.end_time and session.label:
            return session

        slot = self._sessions.resolve(session.session_id) if self._sessions else None
        return replace(
            session,
            start_time=session.start_time or (slot.start_time if slot else None),
            end_time=session.end_time or (slot.end_time if slot else None),
            label=session.label or (slot.label if slot and slot.label else DEFAULT_SESSION_LABEL),
        )
