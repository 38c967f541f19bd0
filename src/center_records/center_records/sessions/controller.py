from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_optional_date
from ..common.http import admin_required, current_role, login_required
from ..container import Container
from ..core.enums import SessionType
from ..core.exceptions import ValidationError
from .model import Session


def session_to_dict(s: Session) -> dict:
    return {
        "id": s.session_id,
        "weekNumber": s.week_number,
        "sessionType": s.session_type.value,
        "sessionTypeLabel": s.session_type.label,
        "displayName": s.display_name,
        "fullMark": s.full_mark,
        "startDate": s.start_date.isoformat() if s.start_date else None,
        "endDate": s.end_date.isoformat() if s.end_date else None,
        "isActive": s.is_active,
        "description": s.description,
    }


def _parse_session_type(value: object) -> SessionType:
    try:
        return SessionType.parse(value) or SessionType.REGULAR
    except ValueError:
        raise ValidationError(f"Invalid session type: {value}. Allowed: {', '.join(SessionType.allowed_labels())}")


def _parse_date_field(value: object, field_name: str):
    try:
        return parse_optional_date(None if value is None else str(value))
    except ValueError:
        raise ValidationError(f"{field_name} must be a YYYY-MM-DD date")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/sessions", methods=["GET"], endpoint="api_sessions_list")
    @login_required
    def api_sessions_list():
        return jsonify([session_to_dict(s) for s in container.session_service.list_sessions()])

    @app.route("/api/sessions", methods=["POST"], endpoint="api_sessions_create")
    @admin_required
    def api_sessions_create():
        data = request.get_json(silent=True) or {}
        try:
            week_number = int(data.get("weekNumber"))
        except (TypeError, ValueError):
            raise ValidationError("Week number must be a positive integer")

        full_mark = data.get("fullMark")
        try:
            full_mark = float(full_mark) if full_mark not in (None, "") else None
        except (TypeError, ValueError):
            raise ValidationError("Full mark must be a number")

        created = container.session_service.create_session(
            current_role=current_role(),
            week_number=week_number,
            session_type=_parse_session_type(data.get("sessionType")),
            full_mark=full_mark,
            start_date=_parse_date_field(data.get("startDate"), "Start date"),
            end_date=_parse_date_field(data.get("endDate"), "End date"),
            description=data.get("description"),
            initialize_records=bool(data.get("initializeRecords", True)),
        )
        return (
            jsonify(
                {
                    "status": "success",
                    "session": session_to_dict(created.session),
                    "studentsInitialized": created.students_initialized,
                }
            ),
            201,
        )

    @app.route("/api/sessions/<int:session_id>", methods=["DELETE"], endpoint="api_sessions_delete")
    @admin_required
    def api_sessions_delete(session_id: int):
        deleted = container.session_service.delete_session(current_role=current_role(), session_id=session_id)
        return jsonify({"status": "success", "deletedRecords": deleted})

    @app.route("/api/sessions/<int:session_id>/records", methods=["DELETE"], endpoint="api_session_records_delete")
    @admin_required
    def api_session_records_delete(session_id: int):
        deleted = container.record_service.delete_weekly_records(
            current_role=current_role(),
            session_id=session_id,
            center=request.args.get("center"),
        )
        return jsonify({"status": "success", "deletedCount": deleted})
