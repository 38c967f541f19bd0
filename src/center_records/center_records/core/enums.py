from __future__ import annotations

from enum import Enum
from typing import Optional


class LabeledEnum(str, Enum):
    """String enum with an Arabic display label.

    The value is what we store in the database; the label is what users
    see on screens, in exports and in uploaded spreadsheets.
    """

    @property
    def label(self) -> str:
        return _LABELS[self]

    @classmethod
    def parse(cls, value: object) -> Optional["LabeledEnum"]:
        """Accept either the stored value or the display label.

        Returns None for an empty cell; raises ValueError for anything else
        that does not match.
        """

        text = "" if value is None else str(value).strip()
        if not text:
            return None
        for member in cls:
            if text == member.value or text == member.label:
                return member
        raise ValueError(text)

    @classmethod
    def allowed_labels(cls) -> list[str]:
        return [m.label for m in cls]


class Role(str, Enum):
    """Who is acting: admins manage data, staff only read."""

    ADMIN = "admin"
    STAFF = "staff"


class AttendanceStatus(LabeledEnum):
    PRESENT = "present"
    PRESENT_MAKEUP = "present-makeup"
    ABSENT = "absent"

    @property
    def is_present(self) -> bool:
        return self in (AttendanceStatus.PRESENT, AttendanceStatus.PRESENT_MAKEUP)


class Gender(LabeledEnum):
    MALE = "male"
    FEMALE = "female"


class Division(LabeledEnum):
    SCIENCE = "science"
    MATHEMATICS = "mathematics"
    AZHAR = "azhar"


class SessionType(LabeledEnum):
    REGULAR = "regular"
    COMPREHENSIVE_EXAM = "comprehensive-exam"


class PasteKind(str, Enum):
    """What the second column of pasted rows holds."""

    ATTENDANCE = "attendance"
    GRADES = "grades"
    ISSUES = "issues"


class UploadKind(str, Enum):
    STUDENTS = "students"
    ATTENDANCE = "attendance"
    ISSUES = "issues"
    GRADES = "grades"

    @property
    def requires_session(self) -> bool:
        return self is not UploadKind.STUDENTS

    @property
    def requires_center(self) -> bool:
        return self is UploadKind.ATTENDANCE


class ReportKind(LabeledEnum):
    ATTENDANCE = "attendance"
    ABSENCE = "absence"
    GRADES = "grades"
    ISSUES = "issues"


_LABELS: dict[Enum, str] = {
    AttendanceStatus.PRESENT: "حضور",
    AttendanceStatus.PRESENT_MAKEUP: "تعويض حضور",
    AttendanceStatus.ABSENT: "غياب",
    Gender.MALE: "ذكر",
    Gender.FEMALE: "انثى",
    Division.SCIENCE: "علمي علوم",
    Division.MATHEMATICS: "علمي رياضة",
    Division.AZHAR: "أزهر",
    SessionType.REGULAR: "عادية",
    SessionType.COMPREHENSIVE_EXAM: "امتحان شامل",
    ReportKind.ATTENDANCE: "حضور",
    ReportKind.ABSENCE: "غياب",
    ReportKind.GRADES: "درجات",
    ReportKind.ISSUES: "مشاكل",
}
