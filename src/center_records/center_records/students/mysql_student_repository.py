from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Division, Gender
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Student, StudentData
from .repository import StudentRepository

_COLUMNS = "student_pk, student_id, full_name, phone_number, parent_phone_number, gender, division, main_center"


def _to_student(r: dict) -> Student:
    return Student(
        student_pk=int(r["student_pk"]),
        student_id=r["student_id"],
        full_name=r["full_name"],
        phone_number=r["phone_number"],
        main_center=r["main_center"],
        parent_phone_number=r.get("parent_phone_number"),
        gender=Gender(r["gender"]) if r.get("gender") else None,
        division=Division(r["division"]) if r.get("division") else None,
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_pk(self, student_pk: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE student_pk=%s", (int(student_pk),))
            r = fetchone(cur)
            return _to_student(r) if r else None

    def get_by_student_id(self, student_id: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE student_id=%s", (student_id,))
            r = fetchone(cur)
            return _to_student(r) if r else None

    def list_by_center(self, main_center: str) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM students WHERE main_center=%s ORDER BY full_name ASC",
                (main_center,),
            )
            return [_to_student(r) for r in fetchall(cur)]

    def list_all(self) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students ORDER BY student_pk ASC")
            return [_to_student(r) for r in fetchall(cur)]

    def count_by_center(self, main_center: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM students WHERE main_center=%s", (main_center,))
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def search(self, query: str, *, limit: int) -> Sequence[Student]:
        like = f"%{query}%"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM students
                WHERE student_id LIKE %s
                   OR full_name LIKE %s
                   OR phone_number LIKE %s
                   OR parent_phone_number LIKE %s
                ORDER BY full_name ASC
                LIMIT %s
                """,
                (like, like, like, like, int(limit)),
            )
            return [_to_student(r) for r in fetchall(cur)]

    def create(self, data: StudentData) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO students(student_id, full_name, phone_number, parent_phone_number, gender, division, main_center)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    data.student_id,
                    data.full_name,
                    data.phone_number,
                    data.parent_phone_number,
                    data.gender.value if data.gender else None,
                    data.division.value if data.division else None,
                    data.main_center,
                ),
            )
            return int(cur.lastrowid)

    def update(self, student_pk: int, data: StudentData, *, keep_missing_optional: bool = False) -> bool:
        sets = ["student_id=%s", "full_name=%s", "phone_number=%s", "parent_phone_number=%s", "main_center=%s"]
        params: list[object] = [
            data.student_id,
            data.full_name,
            data.phone_number,
            data.parent_phone_number,
            data.main_center,
        ]
        if data.gender is not None or not keep_missing_optional:
            sets.append("gender=%s")
            params.append(data.gender.value if data.gender else None)
        if data.division is not None or not keep_missing_optional:
            sets.append("division=%s")
            params.append(data.division.value if data.division else None)
        params.append(int(student_pk))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE students SET {', '.join(sets)} WHERE student_pk=%s", tuple(params))
            # rowcount is 0 when nothing changed, so confirm existence separately
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT 1 AS ok FROM students WHERE student_pk=%s", (int(student_pk),))
            return fetchone(cur) is not None

    def delete(self, student_pk: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM students WHERE student_pk=%s", (int(student_pk),))
            return cur.rowcount > 0
