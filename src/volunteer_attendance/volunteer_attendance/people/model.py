from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time
from typing import Optional, Union

from ..core.enums import SessionStatus


@dataclass(frozen=True)
class ScheduledSession:
    """A session on a volunteer's schedule.

    Times are kept as the directory stores them (strings such as "14:00" or
    "2:00 PM"); the time window evaluator parses them and treats anything
    malformed as not eligible.
    """

    session_id: str
    date: str
    start_time: Union[str, time, None] = None
    end_time: Union[str, time, None] = None
    status: SessionStatus = SessionStatus.SCHEDULED
    label: Optional[str] = None


@dataclass(frozen=True)
class Person:
    """Domain entity: a volunteer. Totals are maintained elsewhere."""

    person_id: str
    full_name: str
    sessions: tuple[ScheduledSession, ...] = field(default_factory=tuple)
    total_hours: float = 0.0
    total_sessions: int = 0
    is_active: bool = True
