from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import admin_required, current_role, login_required
from ..container import Container
from .model import Center


def center_to_dict(c: Center) -> dict:
    return {"id": c.center_id, "name": c.name}


def register(app: Flask, container: Container) -> None:
    @app.route("/api/centers", methods=["GET"], endpoint="api_centers_list")
    @login_required
    def api_centers_list():
        return jsonify([center_to_dict(c) for c in container.center_service.list_centers()])

    @app.route("/api/centers", methods=["POST"], endpoint="api_centers_create")
    @admin_required
    def api_centers_create():
        data = request.get_json(silent=True) or {}
        center = container.center_service.create_center(current_role=current_role(), name=data.get("name"))
        return jsonify({"status": "success", "center": center_to_dict(center)}), 201

    @app.route("/api/centers/<int:center_id>", methods=["PUT"], endpoint="api_centers_rename")
    @admin_required
    def api_centers_rename(center_id: int):
        data = request.get_json(silent=True) or {}
        center = container.center_service.rename_center(
            current_role=current_role(), center_id=center_id, name=data.get("name")
        )
        return jsonify({"status": "success", "center": center_to_dict(center)})

    @app.route("/api/centers/<int:center_id>", methods=["DELETE"], endpoint="api_centers_delete")
    @admin_required
    def api_centers_delete(center_id: int):
        center = container.center_service.delete_center(current_role=current_role(), center_id=center_id)
        return jsonify({"status": "success", "message": "Center deleted", "center": center_to_dict(center)})
