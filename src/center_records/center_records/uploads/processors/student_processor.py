from __future__ import annotations

from ...students.repository import StudentRepository
from ...students.service import normalize_student_fields
from ..model import RowResult, SheetRow
from .base import RowContext, RowProcessor


class StudentRowProcessor(RowProcessor):
    """Roster rows: create the student or update it in place by its code.

    The selected center always becomes the student's main center, so a
    re-upload under another center moves the student.
    """

    def __init__(self, students: StudentRepository):
        self._students = students

    def handle(self, row: SheetRow, ctx: RowContext) -> RowResult:
        data = normalize_student_fields(
            student_id=row.id,
            full_name=row.student_name,
            phone_number=row.student_phone,
            main_center=ctx.center,
            parent_phone_number=row.parent_phone,
            gender=row.gender,
            division=row.division,
        )

        existing = self._students.get_by_student_id(data.student_id)
        if existing:
            self._students.update(existing.student_pk, data, keep_missing_optional=True)
            return RowResult.updated(data.student_id)

        self._students.create(data)
        return RowResult.created(data.student_id)
