from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Center:
    """Lookup entity; students and records reference a center by name."""

    center_id: int
    name: str
    created_at: Optional[datetime] = None
