from __future__ import annotations

from ...common.validators import require_grade
from ...core.exceptions import ValidationError
from ...records.model import RecordChanges
from ...records.repository import RecordRepository
from ...students.repository import StudentRepository
from ..model import RowResult, SheetRow
from .base import RowContext, SessionRowProcessor


class GradeRowProcessor(SessionRowProcessor):
    """Store a listed student's grade for the session.

    The upload center is advisory here: a new record is filed under the
    student's own main center, and an existing makeup record keeps both
    of its stored centers.
    """

    def __init__(self, students: StudentRepository, records: RecordRepository):
        super().__init__(students)
        self._records = records

    def handle(self, row: SheetRow, ctx: RowContext) -> RowResult:
        session = ctx.require_session()

        missing = [name for name, value in (("ID", row.id), ("Grade", row.grade)) if not value.strip()]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        student = self.find_student(row)
        grade = require_grade(row.grade)

        existing = self._records.get_for_student_and_session(student.student_pk, session.session_id)
        if existing and existing.is_makeup:
            changes = RecordChanges(grade=grade)
        else:
            changes = RecordChanges(grade=grade, center=student.main_center, main_center=student.main_center)

        self._records.upsert_for_student_and_session(student.student_pk, session.session_id, changes)
        return RowResult.processed(student.student_id)
