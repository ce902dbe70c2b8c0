"""Time window evaluation for scheduled sessions.

Pure functions of (session, now): no I/O and no clock reads. A session can be
logged from ``start - margin`` to ``end + margin`` on its own date; it is LATE
when logged strictly more than ``late_after`` past its start.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, tzinfo
from typing import Iterable, Optional

from ..common.datetime_utils import combine_local, elapsed_between, parse_session_time, shift_elapsed, to_local
from ..core.constants import DEFAULT_ELIGIBILITY_MARGIN_MINUTES, DEFAULT_LATE_AFTER_MINUTES
from ..core.enums import AttendanceOutcome
from ..people.model import ScheduledSession
from .factory import AttendanceStrategyFactory
from .strategies.base import OutcomeDecision

ZERO = timedelta(0)


@dataclass(frozen=True)
class SessionWindow:
    start: datetime
    end: Optional[datetime]
    opens_at: datetime
    closes_at: datetime

    def contains(self, instant: datetime) -> bool:
        # Compare elapsed time so DST transitions do not skew the bounds.
        return elapsed_between(self.opens_at, instant) >= ZERO and elapsed_between(instant, self.closes_at) >= ZERO


@dataclass(frozen=True)
class TimeWindowEvaluator:
    tz: tzinfo
    margin: timedelta = timedelta(minutes=DEFAULT_ELIGIBILITY_MARGIN_MINUTES)
    late_after: timedelta = timedelta(minutes=DEFAULT_LATE_AFTER_MINUTES)
    strategy_factory: AttendanceStrategyFactory = field(default_factory=AttendanceStrategyFactory)

    def session_start(self, session: ScheduledSession) -> Optional[datetime]:
        """Local start instant, or None when date/start are missing or malformed."""
        try:
            start = parse_session_time(session.start_time)
            if start is None or not session.date:
                return None
            return combine_local(session.date, start, self.tz)
        except (TypeError, ValueError):
            return None

    def window(self, session: ScheduledSession) -> Optional[SessionWindow]:
        start = self.session_start(session)
        if start is None:
            return None

        try:
            end_time = parse_session_time(session.end_time)
        except (TypeError, ValueError):
            return None

        end = None
        if end_time is not None:
            end = combine_local(session.date, end_time, self.tz)
            if end < start:
                # Session runs past midnight.
                end += timedelta(days=1)

        return SessionWindow(
            start=start,
            end=end,
            opens_at=shift_elapsed(start, -self.margin),
            closes_at=shift_elapsed(end or start, self.margin),
        )

    def is_eligible(self, session: ScheduledSession, now: datetime) -> bool:
        window = self.window(session)
        if window is None:
            return False
        return window.contains(to_local(now, self.tz))

    def eligible(self, sessions: Iterable[ScheduledSession], now: datetime) -> list[ScheduledSession]:
        return [s for s in sessions if self.is_eligible(s, now)]

    def decide(self, session: ScheduledSession, now: datetime) -> OutcomeDecision:
        now = to_local(now, self.tz)
        start = self.session_start(session)
        strategy = self.strategy_factory.for_session(now=now, session_start=start, late_after=self.late_after)
        return strategy.decide(now=now, session_start=start)

    def compute_outcome(self, session: ScheduledSession, now: datetime) -> AttendanceOutcome:
        return self.decide(session, now).outcome
