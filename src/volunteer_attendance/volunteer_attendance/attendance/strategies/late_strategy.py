from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceOutcome
from .base import OutcomeDecision, OutcomeStrategy, minutes_after


class LateStrategy(OutcomeStrategy):
    """Logged after the grace period."""

    def decide(self, *, now: datetime, session_start: Optional[datetime]) -> OutcomeDecision:
        return OutcomeDecision(outcome=AttendanceOutcome.LATE, minutes_after_start=minutes_after(now, session_start))
