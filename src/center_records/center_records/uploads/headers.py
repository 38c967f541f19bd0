"""Accepted header sets per upload kind.

Each set maps the exact (trimmed) header text found in a sheet to the
logical column the row processors read.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from .model import LogicalColumn as C


@dataclass(frozen=True)
class HeaderSet:
    name: str
    columns: tuple[tuple[str, C], ...]

    @property
    def headers(self) -> list[str]:
        return [h for h, _ in self.columns]

    def column_for(self, header: str) -> Optional[C]:
        for h, col in self.columns:
            if h == header:
                return col
        return None

    def missing_from(self, found: Sequence[str]) -> list[str]:
        present = set(found)
        return [h for h in self.headers if h not in present]


STUDENT_HEADERS_LATIN = HeaderSet(
    "latin",
    (
        ("ID", C.ID),
        ("Student Name", C.STUDENT_NAME),
        ("Student Phone", C.STUDENT_PHONE),
        ("Parent Phone", C.PARENT_PHONE),
        ("Gender", C.GENDER),
        ("Division", C.DIVISION),
    ),
)

STUDENT_HEADERS_ARABIC = HeaderSet(
    "arabic",
    (
        ("رقم الـ ID", C.ID),
        ("اسم الطالب", C.STUDENT_NAME),
        ("رقم الطالب", C.STUDENT_PHONE),
        ("رقم ولي الأمر", C.PARENT_PHONE),
        ("النوع", C.GENDER),
        ("الشعبة", C.DIVISION),
    ),
)

# Attendance and issue sheets share one layout.
ATTENDANCE_HEADERS = HeaderSet(
    "attendance",
    (
        ("رقم ولي الامر", C.PARENT_PHONE),
        ("رقم الطالب", C.STUDENT_PHONE),
        ("اسم الطالب", C.STUDENT_NAME),
        ("كود الطالب", C.ID),
    ),
)

# The parent phone header is spelled without a space in grade sheets.
GRADE_HEADERS = HeaderSet(
    "grades",
    (
        ("رقم وليامر", C.PARENT_PHONE),
        ("رقم الطالب", C.STUDENT_PHONE),
        ("اسم الطالب", C.STUDENT_NAME),
        ("كود الطالب", C.ID),
        ("الدرجة", C.GRADE),
    ),
)

STUDENT_HEADER_SETS = (STUDENT_HEADERS_LATIN, STUDENT_HEADERS_ARABIC)
