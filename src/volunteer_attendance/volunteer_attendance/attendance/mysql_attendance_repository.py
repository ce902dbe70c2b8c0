from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import normalize_instant, to_storage
from ..core.constants import SESSION_ID_CHUNK_SIZE
from ..core.enums import AttendanceKind, AttendanceOutcome, ConfirmationSource
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, placeholders
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, attendance_type, session_id, record_date, person_id, status,
    confirmed_by, confirmed_at, visit_started_at, visit_ended_at, notes
"""


def _chunks(items: Sequence[str], size: int):
    for i in range(0, len(items), size):
        yield items[i : i + size]


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_recent_for_person(self, person_id: str, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE person_id=%s
                ORDER BY confirmed_at DESC
                LIMIT %s
                """,
                (person_id, int(limit)),
            )
            return [self._to_record(r) for r in fetchall(cur)]

    def list_for_person_sessions(self, person_id: str, session_ids: Sequence[str]) -> Sequence[AttendanceRecord]:
        ids = [str(s) for s in dict.fromkeys(session_ids) if s]
        if not ids:
            return []

        out: list[AttendanceRecord] = []
        with db_cursor(self._conn_factory) as (_, cur):
            for chunk in _chunks(ids, SESSION_ID_CHUNK_SIZE):
                cur.execute(
                    f"""
                    SELECT {_COLUMNS}
                    FROM attendance_records
                    WHERE session_id IN ({placeholders(len(chunk))})
                    """,
                    tuple(chunk),
                )
                out.extend(self._to_record(r) for r in fetchall(cur) if str(r["person_id"]) == person_id)
        return out

    def list_by_kind(self, kind: AttendanceKind, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE attendance_type=%s
                ORDER BY confirmed_at DESC
                LIMIT %s
                """,
                (kind.value, int(limit)),
            )
            return [self._to_record(r) for r in fetchall(cur)]

    def create_record(self, record: AttendanceRecord) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    attendance_type, session_id, record_date, person_id, status,
                    confirmed_by, confirmed_at, visit_started_at, visit_ended_at, notes
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    record.kind.value,
                    record.session_id,
                    record.date,
                    record.person_id,
                    record.outcome.value,
                    record.confirmed_by.value,
                    to_storage(record.confirmed_at),
                    to_storage(record.visit_started_at),
                    to_storage(record.visit_ended_at),
                    record.note,
                ),
            )
            return int(cur.lastrowid)

    def close_visit(self, *, attendance_id: int, visit_ended_at: datetime, note: Optional[str] = None) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET visit_ended_at=%s, notes=COALESCE(%s, notes)
                WHERE attendance_id=%s AND visit_ended_at IS NULL
                """,
                (to_storage(visit_ended_at), note, int(attendance_id)),
            )
            return cur.rowcount > 0

    @staticmethod
    def _to_record(r: dict) -> AttendanceRecord:
        return AttendanceRecord(
            attendance_id=int(r["attendance_id"]),
            kind=AttendanceKind(r["attendance_type"]),
            person_id=str(r["person_id"]),
            date=str(r["record_date"]),
            outcome=AttendanceOutcome(r["status"]),
            confirmed_by=ConfirmationSource(r["confirmed_by"]),
            confirmed_at=normalize_instant(r["confirmed_at"]),
            session_id=r.get("session_id"),
            visit_started_at=normalize_instant(r.get("visit_started_at")),
            visit_ended_at=normalize_instant(r.get("visit_ended_at")),
            note=r.get("notes"),
        )
