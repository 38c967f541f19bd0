from __future__ import annotations

import logging
from typing import Optional

from ..common.locks import SessionLocks
from ..common.permissions import require_admin
from ..common.validators import digits_only, require_digits, require_grade
from ..core.constants import NO_GRADE, STUDENT_ID_DIGITS
from ..core.enums import AttendanceStatus, PasteKind, Role
from ..core.exceptions import DomainError, NotFoundError, ValidationError
from ..sessions.model import Session
from ..sessions.repository import SessionRepository
from ..students.model import Student
from ..students.repository import StudentRepository
from .model import PasteError, PasteSummary, RecordChanges, makeup_reason_for, same_center
from .repository import RecordRepository

logger = logging.getLogger(__name__)

# "warnings" is what older clients send for the issue flag.
_PASTE_KIND_ALIASES = {"warnings": PasteKind.ISSUES}
_TRUE_VALUES = {"true", "1", "yes", "نعم"}


def split_pasted_rows(pasted_data: str) -> list[tuple[int, list[str]]]:
    """Tab-separated lines as copied from a spreadsheet; blank lines are skipped but counted."""

    rows = []
    for line_number, line in enumerate(pasted_data.strip().splitlines(), start=1):
        if not line.strip():
            continue
        rows.append((line_number, [col.strip() for col in line.split("\t")]))
    return rows


class RecordService:
    def __init__(
        self,
        records: RecordRepository,
        sessions: SessionRepository,
        students: StudentRepository,
        locks: Optional[SessionLocks] = None,
    ):
        self._records = records
        self._sessions = sessions
        self._students = students
        self._locks = locks or SessionLocks()

    def delete_weekly_records(self, *, current_role: Role, session_id: int, center: Optional[str] = None) -> int:
        """Delete one session's records, optionally only those attended at `center`."""
        require_admin(current_role)

        session = self._sessions.get_by_id(int(session_id))
        if not session:
            raise NotFoundError("Session not found")

        center = (center or "").strip() or None
        deleted = self._records.delete_by_filter(session.session_id, center)
        logger.info("Deleted %s records for week=%s center=%s", deleted, session.week_number, center or "*")
        return deleted

    def paste_records(
        self,
        *,
        current_role: Role,
        session_id: object,
        center: Optional[str],
        data_type: object,
        pasted_data: Optional[str],
    ) -> PasteSummary:
        """Apply rows of "student id<TAB>value" to one session.

        The value is an attendance status (default present), a grade
        (default "-") or an issue flag (default false). Failing lines are
        reported and the rest still apply.
        """
        require_admin(current_role)

        center = (center or "").strip()
        raw_kind = str(data_type or "").strip().lower()
        if session_id in (None, "") or not center or not raw_kind or not (pasted_data or "").strip():
            raise ValidationError("Session ID, center name, data type, and pasted data are required")

        try:
            kind = _PASTE_KIND_ALIASES.get(raw_kind) or PasteKind(raw_kind)
        except ValueError:
            raise ValidationError(f"Invalid data type: {data_type}. Allowed: {', '.join(k.value for k in PasteKind)}")

        try:
            sid = int(str(session_id).strip())
        except ValueError:
            raise ValidationError(f"Invalid session ID: {session_id}")
        session = self._sessions.get_by_id(sid)
        if not session:
            raise NotFoundError("Session not found")

        summary = PasteSummary(session_week=session.week_number, center=center)
        with self._locks.hold(session.session_id):
            for line_number, columns in split_pasted_rows(pasted_data):
                raw_id = columns[0]
                value = columns[1] if len(columns) > 1 else ""
                try:
                    self._paste_row(kind, session, center, raw_id, value)
                except DomainError as e:
                    logger.warning("Pasted line %s (id=%s) failed: %s", line_number, raw_id, e)
                    summary.errors.append(PasteError(line_number, digits_only(raw_id) or raw_id or "unknown", str(e)))
                    continue
                summary.processed += 1

        logger.info(
            "Pasted %s rows into week=%s center=%s (%s failed)",
            kind.value,
            session.week_number,
            center,
            len(summary.errors),
        )
        return summary

    def _paste_row(self, kind: PasteKind, session: Session, center: str, raw_id: str, value: str) -> None:
        if not raw_id:
            raise ValidationError("Missing student ID in row")
        student_id = require_digits(raw_id, "ID", STUDENT_ID_DIGITS)
        student = self._students.get_by_student_id(student_id)
        if not student:
            raise ValidationError(f"Student not found: {student_id}")

        attended = student.main_center if same_center(center, student.main_center) else center
        existing = self._records.get_for_student_and_session(student.student_pk, session.session_id)

        if kind is PasteKind.ATTENDANCE:
            changes = self._attendance_changes(student, attended, value)
        elif kind is PasteKind.GRADES:
            grade = require_grade(value or NO_GRADE)
            changes = (
                RecordChanges(grade=grade)
                if existing
                else RecordChanges(grade=grade, center=attended, main_center=student.main_center)
            )
        else:
            issue = value.strip().lower() in _TRUE_VALUES
            changes = (
                RecordChanges(issue=issue)
                if existing
                else RecordChanges(issue=issue, center=attended, main_center=student.main_center)
            )

        self._records.upsert_for_student_and_session(student.student_pk, session.session_id, changes)

    @staticmethod
    def _attendance_changes(student: Student, attended: str, value: str) -> RecordChanges:
        try:
            status = AttendanceStatus.parse(value) or AttendanceStatus.PRESENT
        except ValueError:
            raise ValidationError(
                f"Invalid attendance value: {value}. Allowed: {', '.join(AttendanceStatus.allowed_labels())}"
            )

        if status.is_present and attended != student.main_center:
            return RecordChanges(
                attendance=AttendanceStatus.PRESENT_MAKEUP,
                center=attended,
                main_center=student.main_center,
                makeup_reason=makeup_reason_for(attended, student.main_center),
            )
        if status is AttendanceStatus.PRESENT_MAKEUP:
            status = AttendanceStatus.PRESENT
        return RecordChanges(attendance=status, center=attended, main_center=student.main_center)
