from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import SessionType


@dataclass(frozen=True)
class Session:
    """Domain entity: one week's activity, unique by week number."""

    session_id: int
    week_number: int
    session_type: SessionType
    full_mark: float
    start_date: date
    end_date: date
    is_active: bool = True
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        return f"{self.session_type.label} {self.week_number}"


@dataclass(frozen=True)
class NewSession:
    week_number: int
    session_type: SessionType
    full_mark: float
    start_date: date
    end_date: date
    is_active: bool = True
    description: Optional[str] = None
