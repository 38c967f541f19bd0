from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from ..common.permissions import require_admin
from ..common.validators import optional_digits, require_digits, require_min_length
from ..core.constants import (
    MIN_FULL_NAME_LENGTH,
    MIN_SEARCH_QUERY_LENGTH,
    PHONE_DIGITS,
    SEARCH_RESULT_LIMIT,
    STUDENT_ID_DIGITS,
)
from ..core.enums import Division, Gender, LabeledEnum, Role
from ..core.exceptions import NotFoundError, ValidationError
from ..records.model import StudentRecordRow
from ..records.repository import RecordRepository
from .model import Student, StudentData
from .repository import StudentRepository

logger = logging.getLogger(__name__)


def _text(value: object) -> str:
    return "" if value is None else str(value).strip()


def _parse_choice(enum_cls: type[LabeledEnum], value: object, field_name: str):
    try:
        return enum_cls.parse(value)
    except ValueError:
        allowed = ", ".join(enum_cls.allowed_labels())
        raise ValidationError(f"Invalid {field_name} value: {_text(value)}. Allowed: {allowed}")


def normalize_student_fields(
    *,
    student_id: object,
    full_name: object,
    phone_number: object,
    main_center: object,
    parent_phone_number: object = None,
    gender: object = None,
    division: object = None,
) -> StudentData:
    """Validate raw student fields (sheet cells or form values).

    ID and phones are stripped of non-digits and must be exactly 11 digits;
    gender/division are optional but must be a known value when given.
    """

    missing = [
        name
        for name, value in (
            ("ID", student_id),
            ("Student Name", full_name),
            ("Student Phone", phone_number),
            ("Center (mainCenter)", main_center),
        )
        if not _text(value)
    ]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    name = require_min_length(_text(full_name), "Student Name", MIN_FULL_NAME_LENGTH)

    return StudentData(
        student_id=require_digits(student_id, "ID", STUDENT_ID_DIGITS),
        full_name=name,
        phone_number=require_digits(phone_number, "Student Phone", PHONE_DIGITS),
        parent_phone_number=optional_digits(parent_phone_number, "Parent Phone", PHONE_DIGITS),
        main_center=_text(main_center),
        gender=_parse_choice(Gender, gender, "Gender"),
        division=_parse_choice(Division, division, "Division"),
    )


@dataclass(frozen=True)
class StudentProfile:
    student: Student
    records: Sequence[StudentRecordRow]


class StudentService:
    """Use case: search, view and maintain students."""

    def __init__(self, students: StudentRepository, records: RecordRepository):
        self._students = students
        self._records = records

    def get_student(self, student_pk: int) -> Student:
        student = self._students.get_by_pk(int(student_pk))
        if not student:
            raise NotFoundError("Student not found")
        return student

    def search_students(self, query: Optional[str]) -> Sequence[Student]:
        q = _text(query)
        if len(q) < MIN_SEARCH_QUERY_LENGTH:
            raise ValidationError(f"Search query must be at least {MIN_SEARCH_QUERY_LENGTH} characters long")
        return self._students.search(q, limit=SEARCH_RESULT_LIMIT)

    def get_profile(self, student_pk: int) -> StudentProfile:
        student = self.get_student(student_pk)
        rows = sorted(self._records.list_for_student(student.student_pk), key=lambda r: r.week_number, reverse=True)
        return StudentProfile(student=student, records=rows)

    def update_student(
        self,
        *,
        current_role: Role,
        student_pk: int,
        full_name: str,
        phone_number: str,
        main_center: str,
        parent_phone_number: Optional[str] = None,
        gender: Optional[str] = None,
        division: Optional[str] = None,
    ) -> Student:
        require_admin(current_role)
        existing = self.get_student(student_pk)

        data = normalize_student_fields(
            student_id=existing.student_id,
            full_name=full_name,
            phone_number=phone_number,
            main_center=main_center,
            parent_phone_number=parent_phone_number,
            gender=gender,
            division=division,
        )
        if not self._students.update(existing.student_pk, data):
            raise NotFoundError("Student not found")

        if existing.main_center != data.main_center:
            logger.info(
                "Student %s moved from %s to %s", existing.student_id, existing.main_center, data.main_center
            )
        return self.get_student(existing.student_pk)

    def delete_student(self, *, current_role: Role, student_pk: int) -> Student:
        """Delete a student together with all of their records."""
        require_admin(current_role)
        student = self.get_student(student_pk)

        deleted_records = self._records.delete_by_student(student.student_pk)
        self._students.delete(student.student_pk)

        logger.info("Deleted student %s and %s records", student.student_id, deleted_records)
        return student
