from __future__ import annotations

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from src.volunteer_attendance.volunteer_attendance.attendance.windows import TimeWindowEvaluator
from src.volunteer_attendance.volunteer_attendance.core.enums import AttendanceOutcome
from src.volunteer_attendance.volunteer_attendance.people.model import ScheduledSession

TZ = ZoneInfo("Asia/Jerusalem")


def at(hour: int, minute: int = 0, second: int = 0, microsecond: int = 0) -> datetime:
    return datetime(2026, 3, 10, hour, minute, second, microsecond, tzinfo=TZ)


def session(start="14:00", end="15:00", date="2026-03-10") -> ScheduledSession:
    return ScheduledSession(session_id="s1", date=date, start_time=start, end_time=end)


@pytest.fixture
def evaluator() -> TimeWindowEvaluator:
    return TimeWindowEvaluator(tz=TZ)


@pytest.mark.parametrize(
    "now, eligible",
    [
        (at(12, 59, 59), False),
        (at(13, 0), True),
        (at(14, 10), True),
        (at(15, 45), True),
        (at(16, 0), True),
        (at(16, 0, 0, 1), False),
        (at(16, 30), False),
    ],
)
def test_eligibility_window_is_start_minus_hour_to_end_plus_hour(evaluator, now, eligible):
    assert evaluator.is_eligible(session(), now) is eligible


def test_outcome_examples(evaluator):
    assert evaluator.compute_outcome(session(), at(14, 10)) == AttendanceOutcome.PRESENT
    assert evaluator.compute_outcome(session(), at(15, 45)) == AttendanceOutcome.LATE


def test_outcome_boundary_is_present(evaluator):
    assert evaluator.compute_outcome(session(), at(15, 0)) == AttendanceOutcome.PRESENT
    assert evaluator.compute_outcome(session(), at(15, 0, 0, 1)) == AttendanceOutcome.LATE


def test_outcome_before_start_is_present(evaluator):
    assert evaluator.compute_outcome(session(), at(13, 5)) == AttendanceOutcome.PRESENT


def test_missing_end_uses_start_only_window(evaluator):
    s = session(end=None)

    assert evaluator.is_eligible(s, at(13, 0))
    assert evaluator.is_eligible(s, at(15, 0))
    assert not evaluator.is_eligible(s, at(15, 0, 1))


@pytest.mark.parametrize(
    "s",
    [
        session(start=None),
        session(start=""),
        session(start="25:99"),
        session(start="soon"),
        session(end="late afternoon"),
        session(date="10/03/2026"),
        session(date=""),
    ],
)
def test_malformed_input_fails_closed(evaluator, s):
    assert evaluator.is_eligible(s, at(14, 10)) is False


def test_unparseable_start_yields_present(evaluator):
    assert evaluator.compute_outcome(session(start="tbd"), at(23, 0)) == AttendanceOutcome.PRESENT


def test_session_on_another_day_is_not_eligible(evaluator):
    assert not evaluator.is_eligible(session(date="2026-03-09"), at(14, 10))


def test_twelve_hour_times(evaluator):
    s = session(start="2:00 PM", end="3:00 PM")

    assert evaluator.is_eligible(s, at(15, 45))
    assert evaluator.compute_outcome(s, at(15, 45)) == AttendanceOutcome.LATE


def test_naive_now_is_facility_local(evaluator):
    assert evaluator.is_eligible(session(), datetime(2026, 3, 10, 14, 10))


def test_aware_now_is_converted_to_facility_time(evaluator):
    # 12:10 UTC is 14:10 in Jerusalem (UTC+2 in early March).
    now = datetime(2026, 3, 10, 12, 10, tzinfo=timezone.utc)

    assert evaluator.is_eligible(session(), now)
    assert evaluator.compute_outcome(session(), now) == AttendanceOutcome.PRESENT


def test_custom_margins():
    evaluator = TimeWindowEvaluator(tz=TZ, margin=timedelta(minutes=15), late_after=timedelta(minutes=10))

    assert not evaluator.is_eligible(session(), at(13, 44))
    assert evaluator.is_eligible(session(), at(13, 45))
    assert evaluator.compute_outcome(session(), at(14, 11)) == AttendanceOutcome.LATE


def test_eligible_filters_a_list(evaluator):
    morning = ScheduledSession(session_id="m", date="2026-03-10", start_time="09:00", end_time="10:00")
    afternoon = session()

    assert evaluator.eligible([morning, afternoon], at(14, 10)) == [afternoon]


def test_late_threshold_counts_elapsed_time_across_dst_start(evaluator):
    # Clocks jump 02:00 -> 03:00 on 2026-03-27; 03:15 IDT is 45 minutes after 01:30 IST.
    s = session(start="01:30", end="02:30", date="2026-03-27")
    now = datetime(2026, 3, 27, 3, 15, tzinfo=TZ)

    assert evaluator.is_eligible(s, now)
    assert evaluator.compute_outcome(s, now) == AttendanceOutcome.PRESENT
    assert evaluator.decide(s, now).minutes_after_start == 45


def test_window_close_counts_elapsed_time_across_dst_start(evaluator):
    s = session(start="01:00", end="01:30", date="2026-03-27")

    # 03:20 IDT is 50 minutes after the 01:30 IST end.
    assert evaluator.is_eligible(s, datetime(2026, 3, 27, 3, 20, tzinfo=TZ))
    assert not evaluator.is_eligible(s, datetime(2026, 3, 27, 3, 31, tzinfo=TZ))
