from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional, Sequence
from zoneinfo import ZoneInfo

import pytest

from src.volunteer_attendance.volunteer_attendance.attendance.model import AttendanceRecord
from src.volunteer_attendance.volunteer_attendance.common.datetime_utils import FixedClock
from src.volunteer_attendance.volunteer_attendance.container import assemble
from src.volunteer_attendance.volunteer_attendance.core.enums import AttendanceKind
from src.volunteer_attendance.volunteer_attendance.core.exceptions import TransientIOError
from src.volunteer_attendance.volunteer_attendance.people.model import Person, ScheduledSession
from src.volunteer_attendance.volunteer_attendance.sessions.model import SessionSlot

TZ_NAME = "Asia/Jerusalem"
TZ = ZoneInfo(TZ_NAME)
TODAY = "2026-03-10"


def at(hour: int, minute: int = 0, second: int = 0, *, day: int = 10) -> datetime:
    return datetime(2026, 3, day, hour, minute, second, tzinfo=TZ)


class InMemoryAttendance:
    def __init__(self):
        self.records: dict[int, AttendanceRecord] = {}
        self._id = 0
        self.unavailable = False
        self.failing_sessions: set[str] = set()
        self.closed_elsewhere: set[int] = set()
        self.calls: list[str] = []

    def _check(self, op: str) -> None:
        self.calls.append(op)
        if self.unavailable:
            raise TransientIOError("store timed out")

    def seed(self, **fields) -> AttendanceRecord:
        self._id += 1
        rec = AttendanceRecord(attendance_id=self._id, **fields)
        self.records[rec.attendance_id] = rec
        return rec

    def list_recent_for_person(self, person_id: str, limit: int) -> Sequence[AttendanceRecord]:
        self._check("list_recent_for_person")
        items = [r for r in self.records.values() if r.person_id == person_id]
        items.sort(key=lambda r: r.confirmed_at, reverse=True)
        return items[:limit]

    def list_for_person_sessions(self, person_id: str, session_ids: Sequence[str]) -> Sequence[AttendanceRecord]:
        self._check("list_for_person_sessions")
        ids = set(session_ids)
        return [r for r in self.records.values() if r.person_id == person_id and r.session_id in ids]

    def list_by_kind(self, kind: AttendanceKind, limit: int) -> Sequence[AttendanceRecord]:
        self._check("list_by_kind")
        items = [r for r in self.records.values() if r.kind == kind]
        items.sort(key=lambda r: r.confirmed_at, reverse=True)
        return items[:limit]

    def create_record(self, record: AttendanceRecord) -> int:
        self._check("create_record")
        if record.session_id in self.failing_sessions:
            raise TransientIOError(f"write for {record.session_id} timed out")
        self._id += 1
        self.records[self._id] = replace(record, attendance_id=self._id)
        return self._id

    def close_visit(self, *, attendance_id: int, visit_ended_at: datetime, note: Optional[str] = None) -> bool:
        self._check("close_visit")
        rec = self.records.get(attendance_id)
        if not rec or rec.visit_ended_at is not None or attendance_id in self.closed_elsewhere:
            return False
        self.records[attendance_id] = replace(rec, visit_ended_at=visit_ended_at, note=note or rec.note)
        return True

    def of_kind(self, kind: AttendanceKind) -> list[AttendanceRecord]:
        return [r for r in self.records.values() if r.kind == kind]


class InMemoryPeople:
    def __init__(self):
        self.people: dict[str, Person] = {}

    def add(self, person_id: str, *sessions: ScheduledSession, full_name: str = "") -> Person:
        person = Person(person_id=person_id, full_name=full_name or person_id, sessions=tuple(sessions))
        self.people[person_id] = person
        return person

    def get_person(self, person_id: str) -> Optional[Person]:
        return self.people.get(person_id)

    def scheduled_sessions(self, person_id: str) -> Sequence[ScheduledSession]:
        person = self.people.get(person_id)
        return list(person.sessions) if person else []

    def list_names(self) -> dict[str, str]:
        return {p.person_id: p.full_name for p in self.people.values()}


class InMemoryCatalog:
    def __init__(self, slots: dict[str, SessionSlot]):
        self.slots = slots

    def resolve(self, session_id: str) -> Optional[SessionSlot]:
        return self.slots.get(session_id)


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def people() -> InMemoryPeople:
    return InMemoryPeople()


@pytest.fixture
def catalog() -> InMemoryCatalog:
    return InMemoryCatalog({})


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(at(14, 10))


@pytest.fixture
def container(attendance_repo, people, catalog, clock):
    return assemble(
        attendance_repo=attendance_repo,
        people_repo=people,
        sessions_repo=catalog,
        clock=clock,
        facility_timezone=TZ_NAME,
    )
