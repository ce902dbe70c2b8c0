from __future__ import annotations

import logging
from functools import wraps
from typing import Optional

from flask import Flask, jsonify

from ..core.exceptions import StateConflict, TransientIOError, UnknownPerson, ValidationError
from ..container import Container
from .model import AttendanceRecord, PresenceSnapshot

logger = logging.getLogger(__name__)


def record_to_dict(record: Optional[AttendanceRecord]) -> Optional[dict]:
    if record is None:
        return None

    def iso(value):
        return value.isoformat() if value else None

    return {
        "attendance_id": record.attendance_id,
        "kind": record.kind.value,
        "session_id": record.session_id,
        "date": record.date,
        "person_id": record.person_id,
        "outcome": record.outcome.value,
        "confirmed_by": record.confirmed_by.value,
        "confirmed_at": iso(record.confirmed_at),
        "visit_started_at": iso(record.visit_started_at),
        "visit_ended_at": iso(record.visit_ended_at),
        "note": record.note,
    }


def snapshot_to_dict(snapshot: Optional[PresenceSnapshot]) -> Optional[dict]:
    if snapshot is None:
        return None
    return {
        "person_id": snapshot.person_id,
        "checked_in": snapshot.checked_in,
        "open_record": record_to_dict(snapshot.open_record),
        "has_joined_today": snapshot.has_joined_today,
        "earliest_confirmation": snapshot.earliest_confirmation.isoformat() if snapshot.earliest_confirmation else None,
    }


def json_action(view):
    """Map domain outcomes onto succeeded / no-op / failed responses."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            payload, status = view(*args, **kwargs)
            return jsonify({"success": True, **payload}), status
        except StateConflict as e:
            return jsonify(
                {
                    "success": False,
                    "noop": True,
                    "reason": e.reason,
                    "message": str(e),
                    "record": record_to_dict(e.record),
                }
            ), 409
        except ValidationError as e:
            status = 404 if isinstance(e, UnknownPerson) else 400
            return jsonify({"success": False, "message": str(e)}), status
        except TransientIOError as e:
            logger.warning("Attendance store unavailable: %s", e)
            return jsonify({"success": False, "retryable": True, "message": "Attendance store unavailable, try again"}), 503

    return wrapper


def register(app: Flask, container: Container) -> None:
    @app.route("/api/people/<person_id>/presence", methods=["GET"], endpoint="presence_snapshot")
    @json_action
    def presence_snapshot(person_id: str):
        snapshot = container.presence_resolver.snapshot(person_id)
        upcoming = container.presence_resolver.upcoming_sessions(person_id)
        return {
            "snapshot": snapshot_to_dict(snapshot),
            "upcoming_sessions": [
                {
                    "session_id": s.session_id,
                    "date": s.date,
                    "start_time": str(s.start_time) if s.start_time else None,
                    "end_time": str(s.end_time) if s.end_time else None,
                    "label": s.label,
                }
                for s in upcoming
            ],
        }, 200

    @app.route("/api/people/<person_id>/check-in", methods=["POST"], endpoint="facility_check_in")
    @json_action
    def facility_check_in(person_id: str):
        record = container.attendance_service.check_in(person_id)
        return {"message": "Checked in", "record": record_to_dict(record)}, 201

    @app.route("/api/people/<person_id>/check-out", methods=["POST"], endpoint="facility_check_out")
    @json_action
    def facility_check_out(person_id: str):
        record = container.attendance_service.check_out(person_id)
        return {"message": "Checked out", "record": record_to_dict(record)}, 200

    @app.route("/api/people/<person_id>/sessions/log", methods=["POST"], endpoint="log_sessions")
    @json_action
    def log_sessions(person_id: str):
        result = container.attendance_service.log_eligible_sessions(person_id)
        return {
            "message": f"Logged {result.logged_count} session(s)",
            "logged_count": result.logged_count,
            "any_late": result.any_late,
            "failed_session_ids": list(result.failed_session_ids),
        }, 200

    @app.route("/api/people/<person_id>/smart-log", methods=["POST"], endpoint="smart_log")
    @json_action
    def smart_log(person_id: str):
        result = container.reconciler.smart_log(person_id)
        return {
            "action": result.action.value,
            "logged_count": result.logged_count,
            "any_late": result.any_late,
            "record": record_to_dict(result.record),
            "snapshot": snapshot_to_dict(result.snapshot),
        }, 200
