from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional

from ..common.validators import is_valid_grade
from ..core.constants import NO_GRADE
from ..core.enums import AttendanceStatus, ReportKind, SessionType
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class RecordState:
    """The mutable columns of a record, without its keys."""

    center: str
    main_center: str
    attendance: AttendanceStatus = AttendanceStatus.ABSENT
    grade: Optional[str] = NO_GRADE
    issue: bool = False
    makeup_reason: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class Record:
    """Domain entity: one student's participation in one session.

    There is exactly one Record per (student_pk, session_id).
    """

    record_id: int
    student_pk: int
    session_id: int
    state: RecordState
    created_at: Optional[datetime] = None

    @property
    def attendance(self) -> AttendanceStatus:
        return self.state.attendance

    @property
    def grade(self) -> Optional[str]:
        return self.state.grade

    @property
    def issue(self) -> bool:
        return self.state.issue

    @property
    def center(self) -> str:
        return self.state.center

    @property
    def main_center(self) -> str:
        return self.state.main_center

    @property
    def is_makeup(self) -> bool:
        return self.state.attendance is AttendanceStatus.PRESENT_MAKEUP


@dataclass(frozen=True)
class RecordChanges:
    """Fields an upsert sets; None leaves the stored value untouched."""

    attendance: Optional[AttendanceStatus] = None
    grade: Optional[str] = None
    issue: Optional[bool] = None
    center: Optional[str] = None
    main_center: Optional[str] = None
    makeup_reason: Optional[str] = None


@dataclass(frozen=True)
class NewRecord:
    student_pk: int
    session_id: int
    state: RecordState


@dataclass(frozen=True)
class StudentRecordRow:
    """Read-model for the student profile screen."""

    record: Record
    week_number: int
    session_type: SessionType
    full_mark: float


@dataclass(frozen=True)
class RecordReportRow:
    """Read-model for reports/exports: record joined with student and session."""

    record: Record
    student_id: str
    full_name: str
    phone_number: str
    parent_phone_number: Optional[str]
    student_main_center: str
    week_number: int
    session_type: SessionType


def check_record_state(state: RecordState) -> RecordState:
    """Raise ValidationError when a state must not be persisted."""

    if not state.center or not state.main_center:
        raise ValidationError("Record center and main center are required")
    if state.attendance is AttendanceStatus.PRESENT_MAKEUP:
        if same_center(state.center, state.main_center):
            raise ValidationError("Makeup attendance cannot be recorded at the student's main center")
        if not (state.makeup_reason or "").strip():
            raise ValidationError("A makeup reason is required for makeup attendance")
    if state.grade not in (None, "") and not is_valid_grade(state.grade):
        raise ValidationError(f"Grade must be between 0 and 100 or \"{NO_GRADE}\"")
    return state


def apply_changes(current: Optional[RecordState], changes: RecordChanges) -> RecordState:
    """Merge an upsert into the stored state (or the defaults for a new record).

    The makeup reason only survives while attendance stays present-makeup.
    """

    if current is None:
        if not changes.center or not changes.main_center:
            raise ValidationError("A new record needs both center and main center")
        current = RecordState(center=changes.center, main_center=changes.main_center)

    merged = replace(
        current,
        attendance=changes.attendance if changes.attendance is not None else current.attendance,
        grade=changes.grade if changes.grade is not None else current.grade,
        issue=changes.issue if changes.issue is not None else current.issue,
        center=changes.center if changes.center is not None else current.center,
        main_center=changes.main_center if changes.main_center is not None else current.main_center,
        makeup_reason=changes.makeup_reason if changes.makeup_reason is not None else current.makeup_reason,
    )
    if merged.attendance is not AttendanceStatus.PRESENT_MAKEUP:
        merged = replace(merged, makeup_reason=None)
    return check_record_state(merged)


def has_grade(grade: Optional[str]) -> bool:
    return grade not in (None, "", NO_GRADE)


def matches_report_kind(record: Record, kind: Optional[ReportKind]) -> bool:
    """The four report predicates; None matches everything."""

    if kind is None:
        return True
    if kind is ReportKind.ATTENDANCE:
        return record.attendance.is_present
    if kind is ReportKind.ABSENCE:
        return record.attendance is AttendanceStatus.ABSENT
    if kind is ReportKind.GRADES:
        return has_grade(record.grade)
    return record.issue


def same_center(a: Optional[str], b: Optional[str]) -> bool:
    """Center names compare case-insensitively, as the database collation does."""

    return (a or "").strip().casefold() == (b or "").strip().casefold()


def makeup_reason_for(center: str, main_center: str) -> str:
    return f"حضور في سنتر / مجموعة {center} بدلاً من السنتر / المجموعة الأساسي {main_center}"


@dataclass(frozen=True)
class PasteError:
    line_number: int
    student_id: str
    message: str

    def to_dict(self) -> dict:
        return {"lineNumber": self.line_number, "id": self.student_id, "message": self.message}


@dataclass
class PasteSummary:
    """Outcome of applying pasted rows to one session's records."""

    session_week: int
    center: str
    processed: int = 0
    errors: list[PasteError] = field(default_factory=list)

    @property
    def localized_message(self) -> str:
        return f"تمت معالجة {self.processed} سجلًا بنجاح"
