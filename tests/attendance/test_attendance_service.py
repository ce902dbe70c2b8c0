from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from src.volunteer_attendance.volunteer_attendance.core.enums import (
    AttendanceKind,
    AttendanceOutcome,
    ConfirmationSource,
)
from src.volunteer_attendance.volunteer_attendance.core.exceptions import (
    AlreadyCheckedIn,
    NotEligibleForCheckout,
    TransientIOError,
    UnknownPerson,
)
from src.volunteer_attendance.volunteer_attendance.people.model import ScheduledSession

TZ = ZoneInfo("Asia/Jerusalem")


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 3, 10, hour, minute, tzinfo=TZ)


def today_session(session_id: str, start: str, end: str) -> ScheduledSession:
    return ScheduledSession(session_id=session_id, date="2026-03-10", start_time=start, end_time=end)


def test_check_in_creates_open_facility_record(container, people, attendance_repo):
    people.add("v1")

    rec = container.attendance_service.check_in("v1", now=at(9, 0))

    assert rec.attendance_id > 0
    assert rec.kind == AttendanceKind.FACILITY
    assert rec.session_id is None
    assert rec.outcome == AttendanceOutcome.PRESENT
    assert rec.confirmed_by == ConfirmationSource.VOLUNTEER
    assert rec.confirmed_at == rec.visit_started_at == at(9, 0)
    assert rec.visit_ended_at is None
    assert rec.date == "2026-03-10"
    assert attendance_repo.records[rec.attendance_id] == rec


def test_check_in_uses_clock_when_now_not_given(container, people, clock):
    people.add("v1")

    rec = container.attendance_service.check_in("v1")

    assert rec.visit_started_at == clock.now()


def test_double_check_in_is_rejected_without_write(container, people, attendance_repo):
    people.add("v1")
    first = container.attendance_service.check_in("v1", now=at(9, 0))

    with pytest.raises(AlreadyCheckedIn) as exc:
        container.attendance_service.check_in("v1", now=at(9, 5))

    assert exc.value.record.attendance_id == first.attendance_id
    assert len(attendance_repo.records) == 1


def test_check_in_unknown_person(container, attendance_repo):
    with pytest.raises(UnknownPerson):
        container.attendance_service.check_in("ghost", now=at(9, 0))

    assert attendance_repo.records == {}


def test_check_in_then_check_out_round_trip(container, people):
    people.add("v1")
    container.attendance_service.check_in("v1", now=at(9, 0))

    closed = container.attendance_service.check_out("v1", now=at(12, 30))

    assert closed.visit_ended_at == at(12, 30)
    assert closed.visit_ended_at >= closed.visit_started_at
    assert "check-out" in closed.note
    snap = container.presence_resolver.snapshot("v1", now=at(12, 31))
    assert snap.checked_in is False


def test_check_out_never_ends_before_start(container, people):
    people.add("v1")
    container.attendance_service.check_in("v1", now=at(9, 0))

    # Device clock running behind the one that checked in.
    closed = container.attendance_service.check_out("v1", now=at(8, 58))

    assert closed.visit_ended_at == closed.visit_started_at


def test_check_out_without_evidence_is_not_eligible(container, people, attendance_repo):
    people.add("v1", today_session("a", "14:00", "15:00"))

    with pytest.raises(NotEligibleForCheckout):
        container.attendance_service.check_out("v1", now=at(16, 30))

    assert attendance_repo.records == {}


def test_check_out_after_session_join_synthesizes_closed_visit(container, people, attendance_repo):
    people.add("v1", today_session("a", "14:00", "15:00"))
    container.attendance_service.log_eligible_sessions("v1", now=at(14, 5))

    rec = container.attendance_service.check_out("v1", now=at(15, 30))

    assert rec.kind == AttendanceKind.FACILITY
    assert rec.visit_started_at == at(14, 5)
    assert rec.confirmed_at == at(14, 5)
    assert rec.visit_ended_at == at(15, 30)
    assert len(attendance_repo.of_kind(AttendanceKind.FACILITY)) == 1
    assert container.presence_resolver.snapshot("v1", now=at(15, 31)).checked_in is False


def test_check_out_lost_race_reports_conflict(container, people, attendance_repo):
    people.add("v1")
    rec = container.attendance_service.check_in("v1", now=at(9, 0))
    attendance_repo.closed_elsewhere.add(rec.attendance_id)

    with pytest.raises(NotEligibleForCheckout):
        container.attendance_service.check_out("v1", now=at(10, 0))


def test_log_counts_only_unlogged_eligible_sessions(container, people, attendance_repo):
    people.add(
        "v1",
        today_session("a", "14:00", "15:00"),
        today_session("b", "13:30", "14:30"),
        today_session("c", "14:00", "16:00"),
    )
    container.attendance_service.log_sessions("v1", [today_session("c", "14:00", "16:00")], now=at(14, 0))

    result = container.attendance_service.log_eligible_sessions("v1", now=at(14, 10))

    assert result.logged_count == 2
    assert result.any_late is False
    assert {r.session_id for r in result.records} == {"a", "b"}
    assert len(attendance_repo.of_kind(AttendanceKind.SESSION)) == 3


def test_log_is_idempotent(container, people, attendance_repo):
    people.add("v1", today_session("a", "14:00", "15:00"))

    first = container.attendance_service.log_eligible_sessions("v1", now=at(14, 10))
    second = container.attendance_service.log_eligible_sessions("v1", now=at(14, 11))

    assert first.logged_count == 1
    assert second.logged_count == 0
    assert len(attendance_repo.records) == 1


def test_log_marks_late_sessions(container, people):
    people.add("v1", today_session("a", "14:00", "15:00"))

    result = container.attendance_service.log_eligible_sessions("v1", now=at(15, 45))

    assert result.any_late is True
    assert result.records[0].outcome == AttendanceOutcome.LATE
    assert result.records[0].confirmed_at == at(15, 45)


def test_log_outside_window_writes_nothing(container, people, attendance_repo):
    people.add("v1", today_session("a", "14:00", "15:00"))

    result = container.attendance_service.log_eligible_sessions("v1", now=at(16, 30))

    assert result.logged_count == 0
    assert attendance_repo.records == {}


def test_one_failed_write_does_not_block_others(container, people, attendance_repo):
    people.add("v1", today_session("a", "14:00", "15:00"), today_session("b", "14:00", "15:00"))
    attendance_repo.failing_sessions.add("a")

    result = container.attendance_service.log_eligible_sessions("v1", now=at(14, 10))

    assert result.logged_count == 1
    assert result.failed_session_ids == ("a",)
    assert [r.session_id for r in result.records] == ["b"]


def test_all_writes_failing_is_reported_as_failure(container, people, attendance_repo):
    people.add("v1", today_session("a", "14:00", "15:00"))
    attendance_repo.failing_sessions.add("a")

    with pytest.raises(TransientIOError):
        container.attendance_service.log_eligible_sessions("v1", now=at(14, 10))

    assert attendance_repo.records == {}
