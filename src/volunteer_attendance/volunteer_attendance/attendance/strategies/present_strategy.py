from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceOutcome
from .base import OutcomeDecision, OutcomeStrategy, minutes_after


class PresentStrategy(OutcomeStrategy):
    """Logged within the grace period after start (or start unknown)."""

    def decide(self, *, now: datetime, session_start: Optional[datetime]) -> OutcomeDecision:
        return OutcomeDecision(outcome=AttendanceOutcome.PRESENT, minutes_after_start=minutes_after(now, session_start))
