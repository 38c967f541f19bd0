from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import admin_required, current_role, login_required
from ..container import Container
from ..core.constants import DEFAULT_REGULAR_FULL_MARK
from ..records.model import StudentRecordRow
from .model import Student


def student_to_dict(s: Student) -> dict:
    return {
        "id": s.student_pk,
        "studentId": s.student_id,
        "fullName": s.full_name,
        "phoneNumber": s.phone_number,
        "parentPhoneNumber": s.parent_phone_number,
        "mainCenter": s.main_center,
        "gender": s.gender.value if s.gender else None,
        "genderLabel": s.gender.label if s.gender else None,
        "division": s.division.value if s.division else None,
        "divisionLabel": s.division.label if s.division else None,
    }


def profile_record_to_dict(r: StudentRecordRow) -> dict:
    rec = r.record
    return {
        "recordId": rec.record_id,
        "sessionId": rec.session_id,
        "weekNumber": r.week_number,
        "sessionType": r.session_type.value,
        "sessionTypeLabel": r.session_type.label,
        "fullMark": r.full_mark or DEFAULT_REGULAR_FULL_MARK,
        "attendance": rec.attendance.value,
        "attendanceLabel": rec.attendance.label,
        "grade": rec.grade,
        "issue": rec.issue,
        "center": rec.center,
        "mainCenter": rec.main_center,
        "makeupReason": rec.state.makeup_reason,
        "notes": rec.state.notes,
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/students/search", methods=["GET"], endpoint="api_students_search")
    @login_required
    def api_students_search():
        students = container.student_service.search_students(request.args.get("query") or request.args.get("q"))
        return jsonify([student_to_dict(s) for s in students])

    @app.route("/api/students/<int:student_pk>", methods=["GET"], endpoint="api_student_profile")
    @login_required
    def api_student_profile(student_pk: int):
        profile = container.student_service.get_profile(student_pk)
        return jsonify(
            {
                "student": student_to_dict(profile.student),
                "records": [profile_record_to_dict(r) for r in profile.records],
            }
        )

    @app.route("/api/students/<int:student_pk>", methods=["PUT"], endpoint="api_student_update")
    @admin_required
    def api_student_update(student_pk: int):
        data = request.get_json(silent=True) or {}
        student = container.student_service.update_student(
            current_role=current_role(),
            student_pk=student_pk,
            full_name=data.get("fullName"),
            phone_number=data.get("phoneNumber"),
            main_center=data.get("mainCenter"),
            parent_phone_number=data.get("parentPhoneNumber"),
            gender=data.get("gender"),
            division=data.get("division"),
        )
        return jsonify({"status": "success", "student": student_to_dict(student)})

    @app.route("/api/students/<int:student_pk>", methods=["DELETE"], endpoint="api_student_delete")
    @admin_required
    def api_student_delete(student_pk: int):
        student = container.student_service.delete_student(current_role=current_role(), student_pk=student_pk)
        return jsonify({"status": "success", "message": "Student deleted", "student": student_to_dict(student)})
