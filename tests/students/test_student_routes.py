from __future__ import annotations

from src.center_records.center_records.core.enums import Gender
from src.center_records.center_records.records.model import RecordChanges


def test_search_requires_login(app):
    resp = app.test_client().get("/api/students/search?q=ahmed")
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "Access token required"


def test_staff_can_search_and_read_profile(app, login, students, sessions, records):
    s = students.add("12345678901", "Ahmed Ali", "Giza", gender=Gender.MALE)
    session = sessions.add(2)
    records.upsert_for_student_and_session(
        s.student_pk, session.session_id, RecordChanges(grade="7", center="Giza", main_center="Giza")
    )
    client = app.test_client()
    login(client, "staff")

    found = client.get("/api/students/search?query=ahm").get_json()
    profile = client.get(f"/api/students/{s.student_pk}").get_json()

    assert [r["studentId"] for r in found] == ["12345678901"]
    assert found[0]["genderLabel"] == "ذكر"
    assert profile["student"]["fullName"] == "Ahmed Ali"
    assert profile["records"][0]["weekNumber"] == 2
    assert profile["records"][0]["grade"] == "7"
    assert profile["records"][0]["fullMark"] == 10


def test_short_search_is_400_and_missing_profile_is_404(app, login):
    client = app.test_client()
    login(client, "staff")

    short = client.get("/api/students/search?q=a")
    missing = client.get("/api/students/42")

    assert short.status_code == 400
    assert short.get_json()["status"] == "error"
    assert missing.status_code == 404


def test_update_and_delete_need_admin(app, login, students):
    s = students.add("12345678901", "Ahmed Ali", "Giza")
    client = app.test_client()
    login(client, "staff")

    assert client.delete(f"/api/students/{s.student_pk}").status_code == 403

    login(client, "admin")
    updated = client.put(
        f"/api/students/{s.student_pk}",
        json={"fullName": "Ahmed Hassan", "phoneNumber": "010-1234-5679", "mainCenter": "Dokki"},
    )
    deleted = client.delete(f"/api/students/{s.student_pk}")

    assert updated.status_code == 200
    assert updated.get_json()["student"]["phoneNumber"] == "01012345679"
    assert deleted.get_json()["student"]["studentId"] == "12345678901"
    assert students.by_pk == {}
