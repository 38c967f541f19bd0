from __future__ import annotations

import io

from flask import Flask, jsonify, request, send_file

from ..common.http import login_required
from ..container import Container
from .service import ExportFile, report_row_to_dict


def _send(export: ExportFile):
    return send_file(
        io.BytesIO(export.content),
        mimetype=export.mimetype,
        as_attachment=True,
        download_name=export.filename,
    )


def register(app: Flask, container: Container) -> None:
    def _filters() -> dict:
        return {
            "session_id": request.args.get("sessionId") or request.args.get("session"),
            "center": request.args.get("center"),
        }

    @app.route("/api/reports/<kind>", methods=["GET"], endpoint="api_report")
    @login_required
    def api_report(kind: str):
        rows = container.report_service.list_report(kind, **_filters())
        return jsonify([report_row_to_dict(r) for r in rows])

    @app.route("/api/reports/<kind>/export", methods=["GET"], endpoint="api_report_export")
    @login_required
    def api_report_export(kind: str):
        return _send(container.report_service.export_report(kind, **_filters()))

    @app.route("/api/centers/<path:center_name>/export", methods=["GET"], endpoint="api_center_roster_export")
    @login_required
    def api_center_roster_export(center_name: str):
        return _send(container.report_service.export_center_roster(center_name))
