from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import AttendanceKind, AttendanceOutcome, ConfirmationSource, SmartAction


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance record.

    A facility record with no visit end is an open visit (the person is on site).
    Instants are timezone-aware once they leave the repository.
    """

    attendance_id: int
    kind: AttendanceKind
    person_id: str
    date: str
    outcome: AttendanceOutcome
    confirmed_by: ConfirmationSource
    confirmed_at: datetime
    session_id: Optional[str] = None
    visit_started_at: Optional[datetime] = None
    visit_ended_at: Optional[datetime] = None
    note: Optional[str] = None

    @property
    def is_open_visit(self) -> bool:
        return self.kind == AttendanceKind.FACILITY and self.visit_ended_at is None


@dataclass(frozen=True)
class PresenceSnapshot:
    """Read-model: where a person stands right now."""

    person_id: str
    checked_in: bool
    open_record: Optional[AttendanceRecord]
    has_joined_today: bool
    earliest_confirmation: Optional[datetime]
    session_records: tuple[AttendanceRecord, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class SessionLogResult:
    logged_count: int
    any_late: bool
    records: tuple[AttendanceRecord, ...] = field(default_factory=tuple)
    failed_session_ids: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class SmartLogResult:
    action: SmartAction
    logged_count: int = 0
    any_late: bool = False
    record: Optional[AttendanceRecord] = None
    snapshot: Optional[PresenceSnapshot] = None
