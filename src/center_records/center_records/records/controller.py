from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import admin_required, current_role
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/records/paste", methods=["POST"], endpoint="api_records_paste")
    @admin_required
    def api_records_paste():
        data = request.get_json(silent=True) or {}
        summary = container.record_service.paste_records(
            current_role=current_role(),
            session_id=data.get("sessionId"),
            center=data.get("centerName") or data.get("center"),
            data_type=data.get("dataType"),
            pasted_data=data.get("pastedData"),
        )
        return jsonify(
            {
                "status": "success",
                "message": summary.localized_message,
                "processed": summary.processed,
                "errors": [e.to_dict() for e in summary.errors] or None,
                "weekNumber": summary.session_week,
                "center": summary.center,
            }
        )
