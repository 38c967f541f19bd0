from __future__ import annotations

import io

import pandas as pd

from src.center_records.center_records.core.enums import AttendanceStatus
from src.center_records.center_records.records.model import RecordChanges
from src.center_records.center_records.reports.exporter import XLSX_MIMETYPE


def _seed(students, sessions, records):
    ahmed = students.add("12345678901", "Ahmed", "Giza")
    omar = students.add("12345678902", "Omar", "Giza")
    session = sessions.add(1)
    records.upsert_for_student_and_session(
        ahmed.student_pk,
        session.session_id,
        RecordChanges(attendance=AttendanceStatus.PRESENT, center="Giza", main_center="Giza"),
    )
    records.upsert_for_student_and_session(
        omar.student_pk, session.session_id, RecordChanges(center="Giza", main_center="Giza")
    )
    return session


def test_report_listing_with_filters(app, login, students, sessions, records):
    session = _seed(students, sessions, records)
    client = app.test_client()
    login(client, "staff")

    rows = client.get(f"/api/reports/absence?sessionId={session.session_id}&center=Giza").get_json()

    assert len(rows) == 1
    assert rows[0]["student"]["studentId"] == "12345678902"
    assert rows[0]["attendance"] == "absent"
    assert rows[0]["session"]["weekNumber"] == 1


def test_report_errors(app, login):
    client = app.test_client()
    login(client, "staff")

    assert client.get("/api/reports/warnings").status_code == 400
    assert client.get("/api/reports/attendance?sessionId=7").status_code == 404
    assert client.get("/api/reports/attendance/export").status_code == 404


def test_report_export_download(app, login, students, sessions, records):
    _seed(students, sessions, records)
    client = app.test_client()
    login(client, "staff")

    resp = client.get("/api/reports/attendance/export?center=Giza")

    assert resp.status_code == 200
    assert resp.mimetype == XLSX_MIMETYPE
    assert "attachment" in resp.headers["Content-Disposition"]
    df = pd.read_excel(io.BytesIO(resp.data), dtype=str)
    assert df["كود الطالب"].tolist() == ["12345678901"]


def test_center_roster_download(app, login, students):
    students.add("12345678901", "Ahmed", "Giza")
    client = app.test_client()
    login(client, "staff")

    resp = client.get("/api/centers/Giza/export")
    missing = client.get("/api/centers/Nowhere/export")

    assert resp.status_code == 200
    assert pd.read_excel(io.BytesIO(resp.data), dtype=str)["اسم الطالب"].tolist() == ["Ahmed"]
    assert missing.status_code == 404
