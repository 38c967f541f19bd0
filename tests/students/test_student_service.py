from __future__ import annotations

import pytest

from src.center_records.center_records.core.enums import Division, Gender, Role
from src.center_records.center_records.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.center_records.center_records.records.model import RecordChanges
from src.center_records.center_records.students.service import normalize_student_fields


def test_normalize_lists_every_missing_field():
    with pytest.raises(ValidationError) as exc:
        normalize_student_fields(student_id="", full_name=" ", phone_number=None, main_center="Giza")
    assert str(exc.value) == "Missing required fields: ID, Student Name, Student Phone"


def test_normalize_accepts_labels_and_values():
    data = normalize_student_fields(
        student_id="123 456 789 01",
        full_name="Mona Adel",
        phone_number="0101-234-5678",
        main_center=" Giza ",
        gender="female",
        division="علمي رياضة",
    )
    assert data.student_id == "12345678901"
    assert data.phone_number == "01012345678"
    assert data.main_center == "Giza"
    assert data.gender is Gender.FEMALE
    assert data.division is Division.MATHEMATICS


def test_normalize_rejects_short_names():
    with pytest.raises(ValidationError):
        normalize_student_fields(student_id="12345678901", full_name="Al", phone_number="01012345678", main_center="Giza")


def test_search_needs_two_characters(container, students):
    students.add("12345678901", "Ahmed Ali", "Giza")
    students.add("12345678902", "Mona Adel", "Giza")

    with pytest.raises(ValidationError):
        container.student_service.search_students(" a ")

    assert [s.full_name for s in container.student_service.search_students("ahm")] == ["Ahmed Ali"]
    assert len(container.student_service.search_students("1234567890")) == 2


def test_search_returns_at_most_twenty(container, students):
    for i in range(25):
        students.add(f"{10000000000 + i}", f"Student {i:02d}", "Giza")
    assert len(container.student_service.search_students("Student")) == 20


def test_profile_lists_newest_week_first(container, students, sessions, records):
    s = students.add("12345678901", "Ahmed Ali", "Giza")
    for week in (1, 3, 2):
        session = sessions.add(week)
        records.upsert_for_student_and_session(
            s.student_pk, session.session_id, RecordChanges(center="Giza", main_center="Giza")
        )

    profile = container.student_service.get_profile(s.student_pk)

    assert profile.student == s
    assert [r.week_number for r in profile.records] == [3, 2, 1]


def test_profile_of_missing_student(container):
    with pytest.raises(NotFoundError):
        container.student_service.get_profile(7)


def test_update_student_requires_admin_and_normalizes(container, students):
    s = students.add("12345678901", "Ahmed Ali", "Giza", gender=Gender.MALE)

    with pytest.raises(AuthorizationError):
        container.student_service.update_student(
            current_role=Role.STAFF,
            student_pk=s.student_pk,
            full_name="Ahmed",
            phone_number="01012345678",
            main_center="Giza",
        )

    updated = container.student_service.update_student(
        current_role=Role.ADMIN,
        student_pk=s.student_pk,
        full_name="Ahmed Hassan",
        phone_number="010-1234-5679",
        main_center="Dokki",
        parent_phone_number="01198765432",
    )

    assert updated.full_name == "Ahmed Hassan"
    assert updated.phone_number == "01012345679"
    assert updated.main_center == "Dokki"
    assert updated.parent_phone_number == "01198765432"
    # A form update without gender clears it.
    assert updated.gender is None


def test_delete_student_removes_their_records(container, students, sessions, records):
    s = students.add("12345678901", "Ahmed Ali", "Giza")
    other = students.add("12345678902", "Mona Adel", "Giza")
    session = sessions.add(1)
    for student in (s, other):
        records.upsert_for_student_and_session(
            student.student_pk, session.session_id, RecordChanges(center="Giza", main_center="Giza")
        )

    deleted = container.student_service.delete_student(current_role=Role.ADMIN, student_pk=s.student_pk)

    assert deleted == s
    assert students.get_by_pk(s.student_pk) is None
    assert records.list_student_pks_for_session(session.session_id) == {other.student_pk}
