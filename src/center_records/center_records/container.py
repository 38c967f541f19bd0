from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .centers.mysql_center_repository import MySQLCenterRepository
from .centers.repository import CenterRepository
from .centers.service import CenterService
from .common.locks import SessionLocks
from .database.connection import DBConfig, DatabaseConnection
from .records.mysql_record_repository import MySQLRecordRepository
from .records.repository import RecordRepository
from .records.service import RecordService
from .reports.service import ReportService
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.repository import SessionRepository
from .sessions.service import SessionService
from .students.mysql_student_repository import MySQLStudentRepository
from .students.repository import StudentRepository
from .students.service import StudentService
from .uploads.normalizer import SpreadsheetNormalizer
from .uploads.service import UploadService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    students_repo: StudentRepository
    sessions_repo: SessionRepository
    records_repo: RecordRepository
    centers_repo: CenterRepository

    student_service: StudentService
    session_service: SessionService
    record_service: RecordService
    center_service: CenterService
    report_service: ReportService
    upload_service: UploadService


def wire_services(
    *,
    students_repo: StudentRepository,
    sessions_repo: SessionRepository,
    records_repo: RecordRepository,
    centers_repo: CenterRepository,
    conn: Optional[DatabaseConnection] = None,
    strict_grade_headers: bool = False,
) -> Container:
    """Build every service on top of the given repositories."""

    locks = SessionLocks()
    upload_service = UploadService(
        students=students_repo,
        sessions=sessions_repo,
        records=records_repo,
        normalizer=SpreadsheetNormalizer(strict_grade_headers=strict_grade_headers),
        locks=locks,
    )

    return Container(
        conn=conn,
        students_repo=students_repo,
        sessions_repo=sessions_repo,
        records_repo=records_repo,
        centers_repo=centers_repo,
        student_service=StudentService(students_repo, records_repo),
        session_service=SessionService(sessions_repo, students_repo, records_repo),
        record_service=RecordService(records_repo, sessions_repo, students_repo, locks=locks),
        center_service=CenterService(centers_repo, records_repo),
        report_service=ReportService(records_repo, sessions_repo, students_repo),
        upload_service=upload_service,
    )


def build_container(*, db_config: dict, strict_grade_headers: bool = False) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire_services(
        students_repo=MySQLStudentRepository(conn),
        sessions_repo=MySQLSessionRepository(conn),
        records_repo=MySQLRecordRepository(conn),
        centers_repo=MySQLCenterRepository(conn),
        conn=conn,
        strict_grade_headers=strict_grade_headers,
    )
