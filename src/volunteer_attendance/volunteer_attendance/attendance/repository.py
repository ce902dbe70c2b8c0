from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceKind
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Attendance store contract.

    Every read is a single-field fetch (person, session id or kind) of a
    bounded set; services filter and sort the result in memory. A backend
    with composite indexes can implement the same methods natively.
    All methods raise TransientIOError when the store cannot be reached.
    """

    def list_recent_for_person(self, person_id: str, limit: int) -> Sequence[AttendanceRecord]:
        """Most recent records of any kind for a person, newest first."""

        raise NotImplementedError

    def list_for_person_sessions(self, person_id: str, session_ids: Sequence[str]) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_by_kind(self, kind: AttendanceKind, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def create_record(self, record: AttendanceRecord) -> int:
        """Insert a new record (its attendance_id is ignored); returns the new id."""

        raise NotImplementedError

    def close_visit(self, *, attendance_id: int, visit_ended_at: datetime, note: Optional[str] = None) -> bool:
        """Set visit end on a record that is still open.

        Returns False when the record does not exist or was already closed.
        """

        raise NotImplementedError
