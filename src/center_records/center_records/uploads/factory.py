from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import UploadKind
from ..records.repository import RecordRepository
from ..students.repository import StudentRepository
from .processors.base import RowProcessor
from .processors.grade_processor import GradeRowProcessor
from .processors.record_processors import AttendanceRowProcessor, IssueRowProcessor
from .processors.student_processor import StudentRowProcessor


@dataclass
class RowProcessorFactory:
    """Factory Pattern: choose the row processor for an upload kind."""

    students: StudentRepository
    records: RecordRepository

    def for_kind(self, kind: UploadKind) -> RowProcessor:
        if kind is UploadKind.STUDENTS:
            return StudentRowProcessor(self.students)
        if kind is UploadKind.ATTENDANCE:
            return AttendanceRowProcessor(self.students, self.records)
        if kind is UploadKind.ISSUES:
            return IssueRowProcessor(self.students, self.records)
        return GradeRowProcessor(self.students, self.records)
