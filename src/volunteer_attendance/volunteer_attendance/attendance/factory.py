from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ..common.datetime_utils import elapsed_between
from .strategies.base import OutcomeStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.present_strategy import PresentStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose the outcome strategy for a session log."""

    def for_session(self, *, now: datetime, session_start: Optional[datetime], late_after: timedelta) -> OutcomeStrategy:
        if not session_start:
            return PresentStrategy()

        if elapsed_between(session_start, now) <= late_after:
            return PresentStrategy()
        return LateStrategy()
