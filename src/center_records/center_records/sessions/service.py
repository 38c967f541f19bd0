from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional, Sequence

from ..common.datetime_utils import today_local
from ..common.permissions import require_admin
from ..core.constants import DEFAULT_REGULAR_FULL_MARK, DEFAULT_SESSION_DAYS, DEFAULT_SESSION_LIST_LIMIT, NO_GRADE
from ..core.enums import AttendanceStatus, Role, SessionType
from ..core.exceptions import NotFoundError, ValidationError
from ..records.model import NewRecord, RecordState
from ..records.repository import RecordRepository
from ..students.repository import StudentRepository
from .model import NewSession, Session
from .repository import SessionRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CreatedSession:
    session: Session
    students_initialized: int


class SessionService:
    """Use case: weekly sessions (create with seeded absences, list, delete)."""

    def __init__(self, sessions: SessionRepository, students: StudentRepository, records: RecordRepository):
        self._sessions = sessions
        self._students = students
        self._records = records

    def get_session(self, session_id: int) -> Session:
        session = self._sessions.get_by_id(int(session_id))
        if not session:
            raise NotFoundError("Session not found")
        return session

    def list_sessions(self, *, limit: int = DEFAULT_SESSION_LIST_LIMIT) -> Sequence[Session]:
        return self._sessions.list_recent(limit)

    def create_session(
        self,
        *,
        current_role: Role,
        week_number: int,
        session_type: SessionType = SessionType.REGULAR,
        full_mark: Optional[float] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        description: Optional[str] = None,
        initialize_records: bool = True,
    ) -> CreatedSession:
        require_admin(current_role)

        if week_number is None or int(week_number) < 1:
            raise ValidationError("Week number must be a positive integer")
        week_number = int(week_number)

        if self._sessions.get_by_week_number(week_number):
            raise ValidationError("Session for this week already exists")

        if session_type is SessionType.REGULAR:
            full_mark = DEFAULT_REGULAR_FULL_MARK
        elif full_mark is None or float(full_mark) <= 0:
            raise ValidationError("Full mark is required for a comprehensive exam")

        start_date = start_date or today_local()
        end_date = end_date or start_date + timedelta(days=DEFAULT_SESSION_DAYS)
        if end_date < start_date:
            raise ValidationError("End date must not be before start date")

        session_id = self._sessions.create(
            NewSession(
                week_number=week_number,
                session_type=session_type,
                full_mark=float(full_mark),
                start_date=start_date,
                end_date=end_date,
                description=(description or "").strip() or None,
            )
        )
        session = self.get_session(session_id)

        seeded = 0
        if initialize_records:
            seeded = self._records.bulk_insert(
                [
                    NewRecord(
                        student_pk=s.student_pk,
                        session_id=session_id,
                        state=RecordState(
                            center=s.main_center,
                            main_center=s.main_center,
                            attendance=AttendanceStatus.ABSENT,
                            grade=NO_GRADE,
                        ),
                    )
                    for s in self._students.list_all()
                ]
            )

        logger.info("Created session week=%s type=%s seeded=%s", week_number, session_type.value, seeded)
        return CreatedSession(session=session, students_initialized=seeded)

    def delete_session(self, *, current_role: Role, session_id: int) -> int:
        """Delete a session and its records; returns the number of deleted records."""
        require_admin(current_role)

        session = self.get_session(session_id)
        deleted = self._records.delete_by_session(session.session_id)
        self._sessions.delete(session.session_id)

        logger.info("Deleted session week=%s with %s records", session.week_number, deleted)
        return deleted
