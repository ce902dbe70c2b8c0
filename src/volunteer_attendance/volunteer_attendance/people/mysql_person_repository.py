from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import SessionStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import Person, ScheduledSession
from .repository import PersonDirectory


class MySQLPersonDirectory(PersonDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_person(self, person_id: str) -> Optional[Person]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT person_id, full_name, total_hours, total_sessions, is_active
                FROM volunteers
                WHERE person_id=%s
                """,
                (person_id,),
            )
            row = fetchone(cur)
            if not row:
                return None

        return Person(
            person_id=str(row["person_id"]),
            full_name=row["full_name"],
            sessions=tuple(self.scheduled_sessions(person_id)),
            total_hours=float(row.get("total_hours") or 0),
            total_sessions=int(row.get("total_sessions") or 0),
            is_active=bool(row.get("is_active", True)),
        )

    def scheduled_sessions(self, person_id: str) -> Sequence[ScheduledSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT session_id, session_date, start_time, end_time, status, label
                FROM volunteer_sessions
                WHERE person_id=%s
                ORDER BY session_date ASC
                """,
                (person_id,),
            )
            rows = fetchall(cur)
            return [
                ScheduledSession(
                    session_id=str(r["session_id"]),
                    date=r["session_date"].strftime("%Y-%m-%d"),
                    start_time=_clock_value(r.get("start_time")),
                    end_time=_clock_value(r.get("end_time")),
                    status=SessionStatus(r.get("status") or SessionStatus.SCHEDULED.value),
                    label=r.get("label"),
                )
                for r in rows
            ]

    def list_names(self) -> dict[str, str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT person_id, full_name FROM volunteers")
            return {str(r["person_id"]): r["full_name"] or str(r["person_id"]) for r in fetchall(cur)}


def _clock_value(value):
    # Free-text times ("2:00 PM") pass through; TIME columns are normalized.
    if value is None or isinstance(value, str):
        return value
    return normalize_mysql_time(value)
