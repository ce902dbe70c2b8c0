from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import AttendanceKind, AttendanceOutcome, ConfirmationSource
from ..core.exceptions import AlreadyCheckedIn, NotEligibleForCheckout, TransientIOError
from ..people.model import ScheduledSession
from .model import AttendanceRecord, SessionLogResult
from .presence import PresenceResolver
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def _clock_label(now: datetime) -> str:
    return now.strftime("%H:%M:%S")


class AttendanceService:
    """State-changing attendance operations.

    Writes are either inserts or "set visit end on an open record"; no outcome
    is ever rewritten and nothing is deleted. Each operation re-resolves state
    right before writing; there is no lock across read and write.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        presence: PresenceResolver,
        *,
        confirmed_by: ConfirmationSource = ConfirmationSource.VOLUNTEER,
    ):
        self._attendance = attendance
        self._presence = presence
        self._confirmed_by = confirmed_by

    def check_in(self, person_id: str, *, now: Optional[datetime] = None) -> AttendanceRecord:
        now = self._presence.now(now)
        person = self._presence.require_person(person_id)

        existing = self._presence.open_facility_record(person.person_id, now=now)
        if existing:
            raise AlreadyCheckedIn("Volunteer is already checked in", record=existing)

        record = self._insert(
            AttendanceRecord(
                attendance_id=0,
                kind=AttendanceKind.FACILITY,
                person_id=person.person_id,
                date=self._presence.today(now),
                outcome=AttendanceOutcome.PRESENT,
                confirmed_by=self._confirmed_by,
                confirmed_at=now,
                visit_started_at=now,
                visit_ended_at=None,
                note=f"Facility check-in by volunteer at {_clock_label(now)}",
            )
        )
        logger.info("Checked in %s (record #%s)", person.person_id, record.attendance_id)
        return record

    def check_out(self, person_id: str, *, now: Optional[datetime] = None) -> AttendanceRecord:
        now = self._presence.now(now)
        person = self._presence.require_person(person_id)

        open_record = self._presence.open_facility_record(person.person_id, now=now)
        if open_record:
            return self._close(open_record, now)

        evidence = self._presence.session_records_today(person, now=now)
        if not evidence:
            raise NotEligibleForCheckout("Volunteer is not checked in and has no session attendance today")

        # Joined a session without checking in: reconstruct the visit for reporting.
        started_at = min(r.confirmed_at for r in evidence)
        record = self._insert(
            AttendanceRecord(
                attendance_id=0,
                kind=AttendanceKind.FACILITY,
                person_id=person.person_id,
                date=self._presence.today(now),
                outcome=AttendanceOutcome.PRESENT,
                confirmed_by=self._confirmed_by,
                confirmed_at=started_at,
                visit_started_at=started_at,
                visit_ended_at=max(now, started_at),
                note=f"Facility checkout created from session attendance at {_clock_label(now)}",
            )
        )
        logger.info("Created closed visit #%s for %s from session attendance", record.attendance_id, person.person_id)
        return record

    def log_eligible_sessions(self, person_id: str, *, now: Optional[datetime] = None) -> SessionLogResult:
        now = self._presence.now(now)
        person = self._presence.require_person(person_id)
        pending = self._presence.pending_sessions(person.person_id, now=now)
        return self.log_sessions(person.person_id, pending, now=now)

    def log_sessions(
        self,
        person_id: str,
        sessions: Sequence[ScheduledSession],
        *,
        now: Optional[datetime] = None,
    ) -> SessionLogResult:
        """Write one session record per session; failures do not stop the rest.

        ``sessions`` is expected to be the pending set (eligible and not yet logged).
        """

        now = self._presence.now(now)
        evaluator = self._presence.evaluator
        written: list[AttendanceRecord] = []
        failed: list[str] = []

        for session in sessions:
            decision = evaluator.decide(session, now)
            try:
                record = self._insert(
                    AttendanceRecord(
                        attendance_id=0,
                        kind=AttendanceKind.SESSION,
                        person_id=person_id,
                        date=self._presence.today(now),
                        outcome=decision.outcome,
                        confirmed_by=self._confirmed_by,
                        confirmed_at=now,
                        session_id=session.session_id,
                        note=f"Session logged by volunteer at {_clock_label(now)}",
                    )
                )
            except TransientIOError:
                logger.exception("Failed to log session %s for %s", session.session_id, person_id)
                failed.append(session.session_id)
                continue
            written.append(record)

        if sessions and not written:
            raise TransientIOError(f"Could not log any of {len(sessions)} sessions for {person_id}")

        any_late = any(r.outcome == AttendanceOutcome.LATE for r in written)
        if written:
            logger.info(
                "Logged %d session(s) for %s%s", len(written), person_id, " (late)" if any_late else ""
            )
        return SessionLogResult(
            logged_count=len(written),
            any_late=any_late,
            records=tuple(written),
            failed_session_ids=tuple(failed),
        )

    def _insert(self, record: AttendanceRecord) -> AttendanceRecord:
        new_id = self._attendance.create_record(record)
        return replace(record, attendance_id=int(new_id))

    def _close(self, record: AttendanceRecord, now: datetime) -> AttendanceRecord:
        ended_at = max(now, record.visit_started_at or record.confirmed_at)
        note = f"Facility check-out by volunteer at {_clock_label(now)}"
        if not self._attendance.close_visit(attendance_id=record.attendance_id, visit_ended_at=ended_at, note=note):
            # Closed by another device between our read and this write.
            raise NotEligibleForCheckout("Visit was already checked out", record=record)

        logger.info("Checked out %s (record #%s)", record.person_id, record.attendance_id)
        return replace(record, visit_ended_at=ended_at, note=note)
