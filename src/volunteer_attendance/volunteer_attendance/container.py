from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.presence import PresenceResolver
from .attendance.reconciler import AttendanceReconciler
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .attendance.windows import TimeWindowEvaluator
from .common.datetime_utils import Clock, SystemClock
from .core.constants import (
    DEFAULT_ELIGIBILITY_MARGIN_MINUTES,
    DEFAULT_FACILITY_TIMEZONE,
    DEFAULT_LATE_AFTER_MINUTES,
    DEFAULT_RECENT_FETCH_LIMIT,
)
from .database.connection import DBConfig, DatabaseConnection
from .people.mysql_person_repository import MySQLPersonDirectory
from .people.repository import PersonDirectory
from .reports.service import FacilityVisitReportService
from .sessions.mysql_session_catalog import MySQLSessionCatalog
from .sessions.repository import SessionCatalog


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    attendance_repo: AttendanceRepository
    people_repo: PersonDirectory
    sessions_repo: Optional[SessionCatalog]

    clock: Clock
    evaluator: TimeWindowEvaluator
    presence_resolver: PresenceResolver
    attendance_service: AttendanceService
    reconciler: AttendanceReconciler
    visit_report_service: FacilityVisitReportService


def assemble(
    *,
    attendance_repo: AttendanceRepository,
    people_repo: PersonDirectory,
    sessions_repo: Optional[SessionCatalog] = None,
    clock: Optional[Clock] = None,
    conn: Optional[DatabaseConnection] = None,
    facility_timezone: str = DEFAULT_FACILITY_TIMEZONE,
    eligibility_margin_minutes: int = DEFAULT_ELIGIBILITY_MARGIN_MINUTES,
    late_after_minutes: int = DEFAULT_LATE_AFTER_MINUTES,
    recent_fetch_limit: int = DEFAULT_RECENT_FETCH_LIMIT,
) -> Container:
    tz = ZoneInfo(facility_timezone)
    clock = clock or SystemClock(tz)

    evaluator = TimeWindowEvaluator(
        tz=tz,
        margin=timedelta(minutes=int(eligibility_margin_minutes)),
        late_after=timedelta(minutes=int(late_after_minutes)),
        strategy_factory=AttendanceStrategyFactory(),
    )
    presence_resolver = PresenceResolver(
        attendance_repo,
        people_repo,
        evaluator,
        clock,
        sessions=sessions_repo,
        recent_limit=recent_fetch_limit,
    )
    attendance_service = AttendanceService(attendance_repo, presence_resolver)
    reconciler = AttendanceReconciler(presence_resolver, attendance_service)
    visit_report_service = FacilityVisitReportService(attendance_repo, people_repo, tz)

    return Container(
        conn=conn,
        attendance_repo=attendance_repo,
        people_repo=people_repo,
        sessions_repo=sessions_repo,
        clock=clock,
        evaluator=evaluator,
        presence_resolver=presence_resolver,
        attendance_service=attendance_service,
        reconciler=reconciler,
        visit_report_service=visit_report_service,
    )


def build_container(*, db_config: dict, **settings) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_settings(db_config))

    return assemble(
        attendance_repo=MySQLAttendanceRepository(conn),
        people_repo=MySQLPersonDirectory(conn),
        sessions_repo=MySQLSessionCatalog(conn),
        conn=conn,
        **settings,
    )
