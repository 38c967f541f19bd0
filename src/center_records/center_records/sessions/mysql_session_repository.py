from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import SessionType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import NewSession, Session
from .repository import SessionRepository

_COLUMNS = "session_id, week_number, session_type, full_mark, is_active, start_date, end_date, description, created_at"


def _to_session(r: dict) -> Session:
    return Session(
        session_id=int(r["session_id"]),
        week_number=int(r["week_number"]),
        session_type=SessionType(r["session_type"]),
        full_mark=float(r["full_mark"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        is_active=bool(r.get("is_active", True)),
        description=r.get("description"),
        created_at=r.get("created_at"),
    )


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, session_id: int) -> Optional[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM sessions WHERE session_id=%s", (int(session_id),))
            r = fetchone(cur)
            return _to_session(r) if r else None

    def get_by_week_number(self, week_number: int) -> Optional[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM sessions WHERE week_number=%s", (int(week_number),))
            r = fetchone(cur)
            return _to_session(r) if r else None

    def create(self, session: NewSession) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO sessions(week_number, session_type, full_mark, is_active, start_date, end_date, description)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(session.week_number),
                    session.session_type.value,
                    session.full_mark,
                    1 if session.is_active else 0,
                    session.start_date,
                    session.end_date,
                    session.description,
                ),
            )
            return int(cur.lastrowid)

    def list_recent(self, limit: int) -> Sequence[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM sessions ORDER BY week_number DESC LIMIT %s", (int(limit),))
            return [_to_session(r) for r in fetchall(cur)]

    def delete(self, session_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM sessions WHERE session_id=%s", (int(session_id),))
            return cur.rowcount > 0
