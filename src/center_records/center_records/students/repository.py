from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Student, StudentData


class StudentRepository(Protocol):
    """Storage contract for students.

    Services depend on this interface, never on a concrete database.
    """

    def get_by_pk(self, student_pk: int) -> Optional[Student]:
        raise NotImplementedError

    def get_by_student_id(self, student_id: str) -> Optional[Student]:
        raise NotImplementedError

    def list_by_center(self, main_center: str) -> Sequence[Student]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Student]:
        raise NotImplementedError

    def count_by_center(self, main_center: str) -> int:
        raise NotImplementedError

    def search(self, query: str, *, limit: int) -> Sequence[Student]:
        raise NotImplementedError

    def create(self, data: StudentData) -> int:
        raise NotImplementedError

    def update(self, student_pk: int, data: StudentData, *, keep_missing_optional: bool = False) -> bool:
        """Overwrite a student in place.

        With keep_missing_optional=True a None gender/division leaves the
        stored value alone (upload semantics); otherwise None clears it.
        """

        raise NotImplementedError

    def delete(self, student_pk: int) -> bool:
        raise NotImplementedError
