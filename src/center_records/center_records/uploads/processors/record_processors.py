from __future__ import annotations

from ...core.enums import AttendanceStatus
from ...records.model import RecordChanges, makeup_reason_for, same_center
from ...records.repository import RecordRepository
from ...students.repository import StudentRepository
from ..model import RowResult, SheetRow
from .base import RowContext, SessionRowProcessor


class AttendanceRowProcessor(SessionRowProcessor):
    """Mark a listed student present at the upload's center.

    Attending anywhere but the home center is a makeup.
    """

    def __init__(self, students: StudentRepository, records: RecordRepository):
        super().__init__(students)
        self._records = records

    def handle(self, row: SheetRow, ctx: RowContext) -> RowResult:
        session = ctx.require_session()
        center = ctx.require_center()
        student = self.find_student(row)

        if same_center(center, student.main_center):
            changes = RecordChanges(
                attendance=AttendanceStatus.PRESENT,
                center=student.main_center,
                main_center=student.main_center,
            )
        else:
            changes = RecordChanges(
                attendance=AttendanceStatus.PRESENT_MAKEUP,
                center=center,
                main_center=student.main_center,
                makeup_reason=makeup_reason_for(center, student.main_center),
            )

        self._records.upsert_for_student_and_session(student.student_pk, session.session_id, changes)
        return RowResult.processed(student.student_id)


class IssueRowProcessor(SessionRowProcessor):
    """Flag an issue for a listed student; attendance is left alone."""

    def __init__(self, students: StudentRepository, records: RecordRepository):
        super().__init__(students)
        self._records = records

    def handle(self, row: SheetRow, ctx: RowContext) -> RowResult:
        session = ctx.require_session()
        student = self.find_student(row)

        existing = self._records.get_for_student_and_session(student.student_pk, session.session_id)
        if existing:
            # Both stored centers stay as they were when the record was made.
            changes = RecordChanges(issue=True)
        else:
            center = ctx.center or student.main_center
            if same_center(center, student.main_center):
                center = student.main_center
            changes = RecordChanges(issue=True, center=center, main_center=student.main_center)

        self._records.upsert_for_student_and_session(student.student_pk, session.session_id, changes)
        return RowResult.processed(student.student_id)
