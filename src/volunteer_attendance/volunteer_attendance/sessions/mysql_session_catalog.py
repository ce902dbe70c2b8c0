from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, normalize_mysql_time
from .model import SessionSlot
from .repository import SessionCatalog


class MySQLSessionCatalog(SessionCatalog):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def resolve(self, session_id: str) -> Optional[SessionSlot]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT slot_id, slot_date, start_time, end_time, label
                FROM calendar_slots
                WHERE slot_id=%s
                """,
                (session_id,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return SessionSlot(
                session_id=str(r["slot_id"]),
                date=r["slot_date"].strftime("%Y-%m-%d") if r.get("slot_date") else None,
                start_time=normalize_mysql_time(r.get("start_time")),
                end_time=normalize_mysql_time(r.get("end_time")),
                label=r.get("label"),
            )
