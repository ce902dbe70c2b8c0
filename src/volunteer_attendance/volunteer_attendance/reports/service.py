from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Optional

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import local_date_str, to_local
from ..common.validators import require_positive
from ..core.constants import DEFAULT_FACILITY_REPORT_LIMIT
from ..core.enums import AttendanceKind, VisitReportMode
from ..people.repository import PersonDirectory


@dataclass(frozen=True)
class VisitReport:
    rows: list[dict]
    summary: list[dict]


def visit_duration_minutes(start: Optional[datetime], end: Optional[datetime]) -> Optional[int]:
    """Whole minutes between start and end, never negative; None while open."""
    if not start or not end:
        return None
    return max(0, round((end - start).total_seconds() / 60))


def record_date(record: AttendanceRecord, tz: tzinfo) -> str:
    # Older records may lack a stored day; fall back to when they were confirmed.
    if record.date:
        return record.date
    ts = record.confirmed_at or record.visit_started_at
    return local_date_str(ts, tz) if ts else ""


class FacilityVisitReportService:
    """Manager view of facility visits (who is on site, or who came on a day)."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        people: PersonDirectory,
        tz: tzinfo,
        *,
        limit: int = DEFAULT_FACILITY_REPORT_LIMIT,
    ):
        self._attendance = attendance
        self._people = people
        self._tz = tz
        self._limit = require_positive(limit, "limit")

    def build_visit_report(
        self,
        *,
        mode: VisitReportMode = VisitReportMode.DATE,
        day: Optional[str] = None,
        search: str = "",
    ) -> VisitReport:
        records = self._attendance.list_by_kind(AttendanceKind.FACILITY, self._limit)

        if mode == VisitReportMode.ACTIVE:
            selected = [r for r in records if r.is_open_visit]
        else:
            selected = [r for r in records if record_date(r, self._tz) == day]

        selected.sort(key=lambda r: r.confirmed_at.timestamp() if r.confirmed_at else 0.0, reverse=True)
        names = self._people.list_names()
        query = (search or "").strip().lower()

        rows: list[dict] = []
        summary_map: dict[str, dict] = {}
        for r in selected:
            name = names.get(r.person_id) or r.person_id
            if query and query not in name.lower() and query not in r.person_id.lower():
                continue

            start = r.visit_started_at or r.confirmed_at
            minutes = visit_duration_minutes(start, r.visit_ended_at)
            rows.append(
                {
                    "attendance_id": r.attendance_id,
                    "person_id": r.person_id,
                    "full_name": name,
                    "date": r.date or "",
                    "check_in": to_local(start, self._tz).strftime("%H:%M") if start else "",
                    "check_out": to_local(r.visit_ended_at, self._tz).strftime("%H:%M") if r.visit_ended_at else "",
                    "duration_minutes": minutes,
                    "is_active": r.visit_ended_at is None,
                    "status": r.outcome.value,
                    "note": r.note or "",
                }
            )

            s = summary_map.setdefault(r.person_id, {"person_id": r.person_id, "full_name": name, "visits": 0, "total_minutes": 0})
            s["visits"] += 1
            s["total_minutes"] += minutes or 0

        summary = sorted(summary_map.values(), key=lambda x: x["total_minutes"], reverse=True)
        return VisitReport(rows=rows, summary=summary)
