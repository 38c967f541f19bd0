from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import ReportKind
from .model import NewRecord, Record, RecordChanges, RecordReportRow, StudentRecordRow


class RecordRepository(Protocol):
    """Storage contract for records.

    Implementations must keep one record per (student_pk, session_id) and
    run every persisted state through `model.apply_changes` /
    `model.check_record_state`.
    """

    def get_for_student_and_session(self, student_pk: int, session_id: int) -> Optional[Record]:
        raise NotImplementedError

    def upsert_for_student_and_session(self, student_pk: int, session_id: int, changes: RecordChanges) -> Record:
        raise NotImplementedError

    def bulk_insert(self, records: Sequence[NewRecord]) -> int:
        raise NotImplementedError

    def list_student_pks_for_session(self, session_id: int) -> set[int]:
        raise NotImplementedError

    def set_grade_where_missing(self, session_id: int, grade: str) -> int:
        """Bulk update: grade := `grade` for records whose grade is NULL or empty."""

        raise NotImplementedError

    def delete_by_filter(self, session_id: int, center: Optional[str] = None) -> int:
        raise NotImplementedError

    def delete_by_student(self, student_pk: int) -> int:
        raise NotImplementedError

    def delete_by_session(self, session_id: int) -> int:
        raise NotImplementedError

    def count_by_center(self, center: str) -> int:
        raise NotImplementedError

    def list_for_student(self, student_pk: int) -> Sequence[StudentRecordRow]:
        raise NotImplementedError

    def list_report_rows(
        self,
        *,
        kind: Optional[ReportKind] = None,
        session_id: Optional[int] = None,
        center: Optional[str] = None,
    ) -> Sequence[RecordReportRow]:
        raise NotImplementedError
