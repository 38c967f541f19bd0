from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Division, Gender


@dataclass(frozen=True)
class Student:
    """Domain entity: a student registered at one home center.

    `student_pk` is the storage key; `student_id` is the 11-digit code printed
    on sheets and used by every upload.
    """

    student_pk: int
    student_id: str
    full_name: str
    phone_number: str
    main_center: str
    parent_phone_number: Optional[str] = None
    gender: Optional[Gender] = None
    division: Optional[Division] = None


@dataclass(frozen=True)
class StudentData:
    """Validated, normalized payload used to create or update a student."""

    student_id: str
    full_name: str
    phone_number: str
    main_center: str
    parent_phone_number: Optional[str] = None
    gender: Optional[Gender] = None
    division: Optional[Division] = None
