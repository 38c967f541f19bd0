from __future__ import annotations

from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Optional

import pandas as pd
import pytest

from src.center_records.center_records.centers.model import Center
from src.center_records.center_records.container import wire_services
from src.center_records.center_records.main import create_app
from src.center_records.center_records.core.enums import ReportKind, SessionType
from src.center_records.center_records.core.exceptions import StorageError
from src.center_records.center_records.records.model import (
    NewRecord,
    Record,
    RecordChanges,
    RecordReportRow,
    StudentRecordRow,
    apply_changes,
    check_record_state,
    matches_report_kind,
)
from src.center_records.center_records.sessions.model import NewSession, Session
from src.center_records.center_records.students.model import Student, StudentData


class InMemoryStudents:
    def __init__(self):
        self.by_pk: dict[int, Student] = {}
        self._id = 0

    def get_by_pk(self, student_pk: int) -> Optional[Student]:
        return self.by_pk.get(int(student_pk))

    def get_by_student_id(self, student_id: str) -> Optional[Student]:
        return next((s for s in self.by_pk.values() if s.student_id == student_id), None)

    def list_by_center(self, main_center: str):
        return sorted((s for s in self.by_pk.values() if s.main_center == main_center), key=lambda s: s.full_name)

    def list_all(self):
        return sorted(self.by_pk.values(), key=lambda s: s.student_pk)

    def count_by_center(self, main_center: str) -> int:
        return len(self.list_by_center(main_center))

    def search(self, query: str, *, limit: int):
        q = query.lower()
        hits = [
            s
            for s in self.by_pk.values()
            if q in s.student_id
            or q in s.full_name.lower()
            or q in s.phone_number
            or q in (s.parent_phone_number or "")
        ]
        return sorted(hits, key=lambda s: s.full_name)[:limit]

    def create(self, data: StudentData) -> int:
        if self.get_by_student_id(data.student_id):
            raise StorageError("Duplicate student_id")
        self._id += 1
        self.by_pk[self._id] = Student(student_pk=self._id, **vars(data))
        return self._id

    def update(self, student_pk: int, data: StudentData, *, keep_missing_optional: bool = False) -> bool:
        current = self.by_pk.get(int(student_pk))
        if not current:
            return False
        gender = data.gender if (data.gender is not None or not keep_missing_optional) else current.gender
        division = data.division if (data.division is not None or not keep_missing_optional) else current.division
        self.by_pk[current.student_pk] = replace(
            current,
            full_name=data.full_name,
            phone_number=data.phone_number,
            parent_phone_number=data.parent_phone_number,
            main_center=data.main_center,
            gender=gender,
            division=division,
        )
        return True

    def delete(self, student_pk: int) -> bool:
        return self.by_pk.pop(int(student_pk), None) is not None

    def add(self, student_id: str, full_name: str, main_center: str, **kwargs) -> Student:
        pk = self.create(
            StudentData(
                student_id=student_id,
                full_name=full_name,
                phone_number=kwargs.pop("phone_number", "01000000000"),
                main_center=main_center,
                **kwargs,
            )
        )
        return self.by_pk[pk]


class InMemorySessions:
    def __init__(self):
        self.by_id: dict[int, Session] = {}
        self._id = 0

    def get_by_id(self, session_id: int) -> Optional[Session]:
        return self.by_id.get(int(session_id))

    def get_by_week_number(self, week_number: int) -> Optional[Session]:
        return next((s for s in self.by_id.values() if s.week_number == week_number), None)

    def create(self, session: NewSession) -> int:
        self._id += 1
        self.by_id[self._id] = Session(session_id=self._id, **vars(session))
        return self._id

    def list_recent(self, limit: int):
        return sorted(self.by_id.values(), key=lambda s: s.week_number, reverse=True)[:limit]

    def delete(self, session_id: int) -> bool:
        return self.by_id.pop(int(session_id), None) is not None

    def add(self, week_number: int, session_type: SessionType = SessionType.REGULAR, full_mark: float = 10) -> Session:
        sid = self.create(
            NewSession(
                week_number=week_number,
                session_type=session_type,
                full_mark=full_mark,
                start_date=date(2026, 1, 1),
                end_date=date(2026, 1, 8),
            )
        )
        return self.by_id[sid]


class InMemoryRecords:
    """Keyed by (student_pk, session_id) like the UNIQUE index in schema.sql."""

    def __init__(self, students: InMemoryStudents, sessions: InMemorySessions):
        self.by_key: dict[tuple[int, int], Record] = {}
        self._students = students
        self._sessions = sessions
        self._id = 0

    def _next_id(self) -> int:
        self._id += 1
        return self._id

    def get_for_student_and_session(self, student_pk: int, session_id: int) -> Optional[Record]:
        return self.by_key.get((int(student_pk), int(session_id)))

    def upsert_for_student_and_session(self, student_pk: int, session_id: int, changes: RecordChanges) -> Record:
        key = (int(student_pk), int(session_id))
        current = self.by_key.get(key)
        state = apply_changes(current.state if current else None, changes)
        record = (
            replace(current, state=state)
            if current
            else Record(record_id=self._next_id(), student_pk=key[0], session_id=key[1], state=state)
        )
        self.by_key[key] = record
        return record

    def bulk_insert(self, records) -> int:
        for n in records:
            key = (n.student_pk, n.session_id)
            if key in self.by_key:
                raise StorageError(f"Duplicate record for student={n.student_pk} session={n.session_id}")
            self.by_key[key] = Record(
                record_id=self._next_id(),
                student_pk=n.student_pk,
                session_id=n.session_id,
                state=check_record_state(n.state),
            )
        return len(records)

    def list_student_pks_for_session(self, session_id: int) -> set[int]:
        return {pk for (pk, sid) in self.by_key if sid == int(session_id)}

    def set_grade_where_missing(self, session_id: int, grade: str) -> int:
        n = 0
        for key, rec in list(self.by_key.items()):
            if key[1] == int(session_id) and rec.grade in (None, ""):
                self.by_key[key] = replace(rec, state=replace(rec.state, grade=grade))
                n += 1
        return n

    def delete_by_filter(self, session_id: int, center: Optional[str] = None) -> int:
        doomed = [
            key
            for key, rec in self.by_key.items()
            if key[1] == int(session_id) and (not center or rec.center == center)
        ]
        for key in doomed:
            del self.by_key[key]
        return len(doomed)

    def delete_by_student(self, student_pk: int) -> int:
        doomed = [key for key in self.by_key if key[0] == int(student_pk)]
        for key in doomed:
            del self.by_key[key]
        return len(doomed)

    def delete_by_session(self, session_id: int) -> int:
        return self.delete_by_filter(session_id)

    def count_by_center(self, center: str) -> int:
        return sum(1 for r in self.by_key.values() if r.center == center)

    def list_for_student(self, student_pk: int):
        rows = []
        for (pk, sid), rec in self.by_key.items():
            if pk != int(student_pk):
                continue
            s = self._sessions.get_by_id(sid)
            rows.append(
                StudentRecordRow(record=rec, week_number=s.week_number, session_type=s.session_type, full_mark=s.full_mark)
            )
        return rows

    def list_report_rows(
        self,
        *,
        kind: Optional[ReportKind] = None,
        session_id: Optional[int] = None,
        center: Optional[str] = None,
    ):
        rows = []
        for rec in sorted(self.by_key.values(), key=lambda r: r.record_id):
            if session_id is not None and rec.session_id != int(session_id):
                continue
            if center and rec.center != center:
                continue
            if not matches_report_kind(rec, kind):
                continue
            st = self._students.get_by_pk(rec.student_pk)
            s = self._sessions.get_by_id(rec.session_id)
            rows.append(
                RecordReportRow(
                    record=rec,
                    student_id=st.student_id,
                    full_name=st.full_name,
                    phone_number=st.phone_number,
                    parent_phone_number=st.parent_phone_number,
                    student_main_center=st.main_center,
                    week_number=s.week_number,
                    session_type=s.session_type,
                )
            )
        return rows

    def for_session(self, session_id: int) -> list[Record]:
        return [r for (pk, sid), r in self.by_key.items() if sid == int(session_id)]


class InMemoryCenters:
    def __init__(self):
        self.by_id: dict[int, Center] = {}
        self._id = 0

    def get_by_id(self, center_id: int) -> Optional[Center]:
        return self.by_id.get(int(center_id))

    def find_by_name(self, name: str) -> Optional[Center]:
        return next((c for c in self.by_id.values() if c.name.lower() == name.strip().lower()), None)

    def list_all(self):
        return list(self.by_id.values())

    def create(self, name: str) -> int:
        self._id += 1
        self.by_id[self._id] = Center(center_id=self._id, name=name)
        return self._id

    def rename(self, center_id: int, name: str) -> bool:
        c = self.by_id.get(int(center_id))
        if not c:
            return False
        self.by_id[c.center_id] = replace(c, name=name)
        return True

    def delete(self, center_id: int) -> bool:
        return self.by_id.pop(int(center_id), None) is not None


@pytest.fixture
def students() -> InMemoryStudents:
    return InMemoryStudents()


@pytest.fixture
def sessions() -> InMemorySessions:
    return InMemorySessions()


@pytest.fixture
def records(students, sessions) -> InMemoryRecords:
    return InMemoryRecords(students, sessions)


@pytest.fixture
def centers() -> InMemoryCenters:
    return InMemoryCenters()


@pytest.fixture
def container(students, sessions, records, centers):
    return wire_services(
        students_repo=students,
        sessions_repo=sessions,
        records_repo=records,
        centers_repo=centers,
    )


@pytest.fixture
def write_xlsx(tmp_path):
    """Write a one-sheet workbook (header row + data rows) and return its path."""

    counter = {"n": 0}

    def _write(headers: list[str], rows: list[list[object]], name: Optional[str] = None) -> Path:
        counter["n"] += 1
        path = tmp_path / (name or f"upload-{counter['n']}.xlsx")
        pd.DataFrame(rows, columns=headers).to_excel(path, index=False, engine="openpyxl")
        return path

    return _write


@pytest.fixture
def write_csv(tmp_path):
    counter = {"n": 0}

    def _write(headers: list[str], rows: list[list[object]], name: Optional[str] = None) -> Path:
        counter["n"] += 1
        path = tmp_path / (name or f"upload-{counter['n']}.csv")
        pd.DataFrame(rows, columns=headers).to_csv(path, index=False, encoding="utf-8-sig")
        return path

    return _write


@pytest.fixture
def app(container, tmp_path, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container)
    app.config["UPLOAD_FOLDER"] = str(tmp_path / "uploads")
    return app


@pytest.fixture
def login():
    """Sign a test client in by seeding the Flask session."""

    def _login(client, role: str = "admin") -> None:
        with client.session_transaction() as sess:
            sess["user_id"] = 1
            sess["role"] = role

    return _login
