from __future__ import annotations

from typing import Optional, Sequence

from ..core.constants import NO_GRADE
from ..core.enums import AttendanceStatus, ReportKind, SessionType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import (
    NewRecord,
    Record,
    RecordChanges,
    RecordReportRow,
    RecordState,
    StudentRecordRow,
    apply_changes,
    check_record_state,
)
from .repository import RecordRepository

_COLUMNS = (
    "r.record_id, r.student_pk, r.session_id, r.attendance, r.grade, r.issue, "
    "r.center, r.main_center, r.makeup_reason, r.notes, r.created_at"
)

_KIND_CLAUSES = {
    ReportKind.ATTENDANCE: "r.attendance IN ('present', 'present-makeup')",
    ReportKind.ABSENCE: "r.attendance = 'absent'",
    ReportKind.GRADES: f"r.grade IS NOT NULL AND r.grade <> '' AND r.grade <> '{NO_GRADE}'",
    ReportKind.ISSUES: "r.issue = 1",
}


def _to_record(r: dict) -> Record:
    return Record(
        record_id=int(r["record_id"]),
        student_pk=int(r["student_pk"]),
        session_id=int(r["session_id"]),
        state=RecordState(
            center=r["center"],
            main_center=r["main_center"],
            attendance=AttendanceStatus(r["attendance"]),
            grade=r.get("grade"),
            issue=bool(r.get("issue")),
            makeup_reason=r.get("makeup_reason"),
            notes=r.get("notes"),
        ),
        created_at=r.get("created_at"),
    )


def _state_params(state: RecordState) -> tuple:
    return (
        state.attendance.value,
        state.grade,
        1 if state.issue else 0,
        state.center,
        state.main_center,
        state.makeup_reason,
        state.notes,
    )


class MySQLRecordRepository(RecordRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_student_and_session(self, student_pk: int, session_id: int) -> Optional[Record]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM records r WHERE r.student_pk=%s AND r.session_id=%s",
                (int(student_pk), int(session_id)),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def upsert_for_student_and_session(self, student_pk: int, session_id: int, changes: RecordChanges) -> Record:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM records r WHERE r.student_pk=%s AND r.session_id=%s FOR UPDATE",
                (int(student_pk), int(session_id)),
            )
            existing = fetchone(cur)
            current = _to_record(existing) if existing else None
            state = apply_changes(current.state if current else None, changes)

            if current is None:
                cur.execute(
                    """
                    INSERT INTO records(student_pk, session_id, attendance, grade, issue, center, main_center, makeup_reason, notes)
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (int(student_pk), int(session_id)) + _state_params(state),
                )
                return Record(
                    record_id=int(cur.lastrowid),
                    student_pk=int(student_pk),
                    session_id=int(session_id),
                    state=state,
                )

            cur.execute(
                """
                UPDATE records
                SET attendance=%s, grade=%s, issue=%s, center=%s, main_center=%s, makeup_reason=%s, notes=%s
                WHERE record_id=%s
                """,
                _state_params(state) + (current.record_id,),
            )
            return Record(
                record_id=current.record_id,
                student_pk=current.student_pk,
                session_id=current.session_id,
                state=state,
                created_at=current.created_at,
            )

    def bulk_insert(self, records: Sequence[NewRecord]) -> int:
        if not records:
            return 0
        rows = [
            (int(n.student_pk), int(n.session_id)) + _state_params(check_record_state(n.state))
            for n in records
        ]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT INTO records(student_pk, session_id, attendance, grade, issue, center, main_center, makeup_reason, notes)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                rows,
            )
            return len(rows)

    def list_student_pks_for_session(self, session_id: int) -> set[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT student_pk FROM records WHERE session_id=%s", (int(session_id),))
            return {int(r["student_pk"]) for r in fetchall(cur)}

    def set_grade_where_missing(self, session_id: int, grade: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE records SET grade=%s WHERE session_id=%s AND (grade IS NULL OR grade='')",
                (grade, int(session_id)),
            )
            return int(cur.rowcount)

    def delete_by_filter(self, session_id: int, center: Optional[str] = None) -> int:
        sql = "DELETE FROM records WHERE session_id=%s"
        params: list[object] = [int(session_id)]
        if center:
            sql += " AND center=%s"
            params.append(center)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return int(cur.rowcount)

    def delete_by_student(self, student_pk: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM records WHERE student_pk=%s", (int(student_pk),))
            return int(cur.rowcount)

    def delete_by_session(self, session_id: int) -> int:
        return self.delete_by_filter(session_id)

    def count_by_center(self, center: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM records WHERE center=%s", (center,))
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def list_for_student(self, student_pk: int) -> Sequence[StudentRecordRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}, s.week_number, s.session_type, s.full_mark
                FROM records r
                JOIN sessions s ON s.session_id = r.session_id
                WHERE r.student_pk=%s
                ORDER BY s.week_number DESC
                """,
                (int(student_pk),),
            )
            return [
                StudentRecordRow(
                    record=_to_record(r),
                    week_number=int(r["week_number"]),
                    session_type=SessionType(r["session_type"]),
                    full_mark=float(r["full_mark"]),
                )
                for r in fetchall(cur)
            ]

    def list_report_rows(
        self,
        *,
        kind: Optional[ReportKind] = None,
        session_id: Optional[int] = None,
        center: Optional[str] = None,
    ) -> Sequence[RecordReportRow]:
        clauses: list[str] = []
        params: list[object] = []

        if session_id is not None:
            clauses.append("r.session_id=%s")
            params.append(int(session_id))
        if center:
            clauses.append("r.center=%s")
            params.append(center)
        if kind is not None:
            clauses.append(_KIND_CLAUSES[kind])

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    {_COLUMNS},
                    st.student_id, st.full_name, st.phone_number, st.parent_phone_number,
                    st.main_center AS student_main_center,
                    s.week_number, s.session_type
                FROM records r
                JOIN students st ON st.student_pk = r.student_pk
                JOIN sessions s ON s.session_id = r.session_id
                {where}
                ORDER BY r.created_at DESC, r.record_id DESC
                """,
                tuple(params),
            )
            return [
                RecordReportRow(
                    record=_to_record(r),
                    student_id=r["student_id"],
                    full_name=r["full_name"],
                    phone_number=r["phone_number"],
                    parent_phone_number=r.get("parent_phone_number"),
                    student_main_center=r["student_main_center"],
                    week_number=int(r["week_number"]),
                    session_type=SessionType(r["session_type"]),
                )
                for r in fetchall(cur)
            ]
