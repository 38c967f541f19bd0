from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import NewSession, Session


class SessionRepository(Protocol):
    def get_by_id(self, session_id: int) -> Optional[Session]:
        raise NotImplementedError

    def get_by_week_number(self, week_number: int) -> Optional[Session]:
        raise NotImplementedError

    def create(self, session: NewSession) -> int:
        raise NotImplementedError

    def list_recent(self, limit: int) -> Sequence[Session]:
        """Newest week first."""

        raise NotImplementedError

    def delete(self, session_id: int) -> bool:
        raise NotImplementedError
