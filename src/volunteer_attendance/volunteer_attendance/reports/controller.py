from __future__ import annotations

from flask import Flask, request

from ..attendance.controller import json_action
from ..common.datetime_utils import parse_iso_date
from ..core.enums import VisitReportMode
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/facility/visits", methods=["GET"], endpoint="facility_visits")
    @json_action
    def facility_visits():
        try:
            mode = VisitReportMode(request.args.get("mode") or VisitReportMode.DATE.value)
        except ValueError:
            raise ValidationError("mode must be 'active' or 'date'") from None

        day = request.args.get("date") or container.presence_resolver.today()
        try:
            parse_iso_date(day)
        except ValueError:
            raise ValidationError("date must be YYYY-MM-DD") from None

        report = container.visit_report_service.build_visit_report(mode=mode, day=day, search=request.args.get("q", ""))
        return {"mode": mode.value, "date": day, "count": len(report.rows), "rows": report.rows, "summary": report.summary}, 200
