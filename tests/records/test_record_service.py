from __future__ import annotations

import pytest

from src.center_records.center_records.core.enums import AttendanceStatus, Role
from src.center_records.center_records.core.exceptions import AuthorizationError, NotFoundError
from src.center_records.center_records.records.model import RecordChanges, makeup_reason_for


def _seed(students, sessions, records):
    ahmed = students.add("12345678901", "Ahmed", "Giza")
    mona = students.add("12345678902", "Mona", "Dokki")
    session = sessions.add(1)
    records.upsert_for_student_and_session(
        ahmed.student_pk, session.session_id, RecordChanges(center="Giza", main_center="Giza")
    )
    records.upsert_for_student_and_session(
        mona.student_pk,
        session.session_id,
        RecordChanges(
            attendance=AttendanceStatus.PRESENT_MAKEUP,
            center="Giza",
            main_center="Dokki",
            makeup_reason=makeup_reason_for("Giza", "Dokki"),
        ),
    )
    return session


def test_delete_weekly_records_by_attended_center(container, students, sessions, records):
    session = _seed(students, sessions, records)

    deleted = container.record_service.delete_weekly_records(
        current_role=Role.ADMIN, session_id=session.session_id, center="Giza"
    )

    assert deleted == 2
    assert records.for_session(session.session_id) == []


def test_delete_weekly_records_other_center_leaves_rows(container, students, sessions, records):
    session = _seed(students, sessions, records)

    deleted = container.record_service.delete_weekly_records(
        current_role=Role.ADMIN, session_id=session.session_id, center="Dokki"
    )

    assert deleted == 0
    assert len(records.for_session(session.session_id)) == 2


def test_delete_weekly_records_checks_role_and_session(container):
    with pytest.raises(AuthorizationError):
        container.record_service.delete_weekly_records(current_role=Role.STAFF, session_id=1)
    with pytest.raises(NotFoundError):
        container.record_service.delete_weekly_records(current_role=Role.ADMIN, session_id=42)
