from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ...common.validators import digits_only, require_digits
from ...core.constants import STUDENT_ID_DIGITS
from ...core.enums import UploadKind
from ...core.exceptions import DomainError, ValidationError
from ...sessions.model import Session
from ...students.model import Student
from ...students.repository import StudentRepository
from ..model import RowResult, SheetRow


@dataclass(frozen=True)
class RowContext:
    """Upload-wide parameters every row of one file shares."""

    kind: UploadKind
    center: Optional[str] = None
    session: Optional[Session] = None

    def require_session(self) -> Session:
        if self.session is None:
            raise ValidationError("Session is required for this upload type")
        return self.session

    def require_center(self) -> str:
        if not self.center:
            raise ValidationError("Center is required for this upload type")
        return self.center


class RowProcessor(ABC):
    """Strategy Pattern: one processor per upload kind.

    `process` never raises a domain error; bad rows come back as
    `RowResult.error` so the caller can keep going.
    """

    def process(self, row: SheetRow, ctx: RowContext) -> RowResult:
        try:
            return self.handle(row, ctx)
        except DomainError as e:
            return RowResult.error(digits_only(row.id) or row.id, str(e))

    @abstractmethod
    def handle(self, row: SheetRow, ctx: RowContext) -> RowResult:
        raise NotImplementedError


class SessionRowProcessor(RowProcessor):
    """Shared lookup for kinds that write one session's records."""

    def __init__(self, students: StudentRepository):
        self._students = students

    def find_student(self, row: SheetRow) -> Student:
        if not row.id.strip():
            raise ValidationError("Missing required fields: ID")
        student_id = require_digits(row.id, "ID", STUDENT_ID_DIGITS)

        student = self._students.get_by_student_id(student_id)
        if not student:
            raise ValidationError("Student not found")
        return student
