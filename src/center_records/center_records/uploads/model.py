from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..core.enums import UploadKind


class LogicalColumn(str, Enum):
    """Canonical column names every row processor reads, whatever the sheet's script."""

    ID = "ID"
    STUDENT_NAME = "Student Name"
    STUDENT_PHONE = "Student Phone"
    PARENT_PHONE = "Parent Phone"
    GENDER = "Gender"
    DIVISION = "Division"
    GRADE = "Grade"

    @property
    def attr(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class SheetRow:
    """One data row, already mapped from sheet headers to logical columns.

    Every cell is text; an absent column and an empty cell are both "".
    """

    row_number: int
    id: str = ""
    student_name: str = ""
    student_phone: str = ""
    parent_phone: str = ""
    gender: str = ""
    division: str = ""
    grade: str = ""

    @classmethod
    def from_cells(cls, row_number: int, cells: dict[LogicalColumn, str]) -> "SheetRow":
        return cls(row_number=row_number, **{col.attr: value for col, value in cells.items()})


class RowOutcome(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    PROCESSED = "processed"
    ERROR = "error"


@dataclass(frozen=True)
class RowResult:
    outcome: RowOutcome
    student_id: str
    message: Optional[str] = None

    @classmethod
    def created(cls, student_id: str) -> "RowResult":
        return cls(RowOutcome.CREATED, student_id)

    @classmethod
    def updated(cls, student_id: str) -> "RowResult":
        return cls(RowOutcome.UPDATED, student_id)

    @classmethod
    def processed(cls, student_id: str) -> "RowResult":
        return cls(RowOutcome.PROCESSED, student_id)

    @classmethod
    def error(cls, student_id: str, message: str) -> "RowResult":
        return cls(RowOutcome.ERROR, student_id or "unknown", message)

    @property
    def is_error(self) -> bool:
        return self.outcome is RowOutcome.ERROR


@dataclass(frozen=True)
class RowError:
    row_number: int
    student_id: str
    message: str

    def to_dict(self) -> dict:
        return {"rowNumber": self.row_number, "id": self.student_id, "message": self.message}


@dataclass
class UploadSummary:
    kind: UploadKind
    processed: int = 0
    created: int = 0
    updated: int = 0
    errors: list[RowError] = field(default_factory=list)
    absent_marked: int = 0
    grades_defaulted: int = 0

    def add(self, row_number: int, result: RowResult) -> None:
        if result.is_error:
            self.errors.append(RowError(row_number, result.student_id, result.message or "Unknown error"))
            return
        self.processed += 1
        if result.outcome is RowOutcome.CREATED:
            self.created += 1
        elif result.outcome is RowOutcome.UPDATED:
            self.updated += 1

    @property
    def message(self) -> str:
        text = f"Successfully processed {self.processed} records ({self.created} created, {self.updated} updated)"
        if self.errors:
            text += f"; {len(self.errors)} row(s) failed"
        return text

    @property
    def localized_message(self) -> str:
        if self.kind is UploadKind.STUDENTS:
            return f"تم بنجاح! إضافة {self.created} طالبًا جديدًا وتحديث بيانات {self.updated} طلاب"
        return f"تم معالجة {self.processed} سجل بنجاح"

    def details(self) -> dict:
        return {
            "created": self.created,
            "updated": self.updated,
            "processed": self.processed,
            "errors": [e.to_dict() for e in self.errors],
            "absentMarked": self.absent_marked,
            "gradesDefaulted": self.grades_defaulted,
        }
