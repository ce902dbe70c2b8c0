from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...common.datetime_utils import elapsed_between
from ...core.enums import AttendanceOutcome


@dataclass(frozen=True)
class OutcomeDecision:
    outcome: AttendanceOutcome
    minutes_after_start: Optional[int] = None


class OutcomeStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide a session outcome."""

    @abstractmethod
    def decide(self, *, now: datetime, session_start: Optional[datetime]) -> OutcomeDecision:
        raise NotImplementedError


def minutes_after(now: datetime, session_start: Optional[datetime]) -> Optional[int]:
    if session_start is None:
        return None
    return int(elapsed_between(session_start, now).total_seconds() // 60)
