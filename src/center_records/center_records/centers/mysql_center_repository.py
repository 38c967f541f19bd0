from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Center
from .repository import CenterRepository


def _to_center(r: dict) -> Center:
    return Center(center_id=int(r["center_id"]), name=r["name"], created_at=r.get("created_at"))


class MySQLCenterRepository(CenterRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, center_id: int) -> Optional[Center]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT center_id, name, created_at FROM centers WHERE center_id=%s", (int(center_id),))
            r = fetchone(cur)
            return _to_center(r) if r else None

    def find_by_name(self, name: str) -> Optional[Center]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT center_id, name, created_at FROM centers WHERE LOWER(name)=LOWER(%s)",
                (name.strip(),),
            )
            r = fetchone(cur)
            return _to_center(r) if r else None

    def list_all(self) -> Sequence[Center]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT center_id, name, created_at FROM centers ORDER BY name ASC")
            return [_to_center(r) for r in fetchall(cur)]

    def create(self, name: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("INSERT INTO centers(name) VALUES(%s)", (name,))
            return int(cur.lastrowid)

    def rename(self, center_id: int, name: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE centers SET name=%s WHERE center_id=%s", (name, int(center_id)))
            return cur.rowcount > 0

    def delete(self, center_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM centers WHERE center_id=%s", (int(center_id),))
            return cur.rowcount > 0
