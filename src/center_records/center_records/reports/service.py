from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from ..common.datetime_utils import today_local
from ..core.enums import ReportKind
from ..core.exceptions import NotFoundError, ValidationError
from ..records.model import RecordReportRow
from ..records.repository import RecordRepository
from ..sessions.model import Session
from ..sessions.repository import SessionRepository
from ..students.repository import StudentRepository
from . import exporter


@dataclass(frozen=True)
class ExportFile:
    filename: str
    content: bytes
    mimetype: str = exporter.XLSX_MIMETYPE


def report_row_to_dict(r: RecordReportRow) -> dict:
    rec = r.record
    return {
        "recordId": rec.record_id,
        "attendance": rec.attendance.value,
        "attendanceLabel": rec.attendance.label,
        "grade": rec.grade,
        "issue": rec.issue,
        "center": rec.center,
        "mainCenter": rec.main_center,
        "makeupReason": rec.state.makeup_reason,
        "student": {
            "studentId": r.student_id,
            "fullName": r.full_name,
            "phoneNumber": r.phone_number,
            "parentPhoneNumber": r.parent_phone_number,
            "mainCenter": r.student_main_center,
        },
        "session": {
            "sessionId": rec.session_id,
            "weekNumber": r.week_number,
            "sessionType": r.session_type.value,
        },
    }


class ReportService:
    """Use case: filtered record listings and their spreadsheet exports.

    The center filter matches the center a record was attended at, so a
    makeup shows up under the center that hosted it.
    """

    def __init__(self, records: RecordRepository, sessions: SessionRepository, students: StudentRepository):
        self._records = records
        self._sessions = sessions
        self._students = students

    @staticmethod
    def parse_kind(kind: object) -> ReportKind:
        try:
            parsed = ReportKind.parse(kind)
        except ValueError:
            parsed = None
        if parsed is None:
            raise ValidationError("Invalid report type")
        return parsed

    def _session_or_none(self, session_id: Optional[object]) -> Optional[Session]:
        raw = "" if session_id is None else str(session_id).strip()
        if not raw:
            return None
        try:
            sid = int(raw)
        except ValueError:
            raise ValidationError(f"Invalid session ID: {raw}")
        session = self._sessions.get_by_id(sid)
        if not session:
            raise NotFoundError("Session not found")
        return session

    def list_report(
        self,
        kind: object,
        *,
        session_id: Optional[object] = None,
        center: Optional[str] = None,
    ) -> Sequence[RecordReportRow]:
        report_kind = self.parse_kind(kind)
        session = self._session_or_none(session_id)
        return self._records.list_report_rows(
            kind=report_kind,
            session_id=session.session_id if session else None,
            center=(center or "").strip() or None,
        )

    def export_report(
        self,
        kind: object,
        *,
        session_id: Optional[object] = None,
        center: Optional[str] = None,
    ) -> ExportFile:
        report_kind = self.parse_kind(kind)
        session = self._session_or_none(session_id)
        center = (center or "").strip() or None

        rows = self._records.list_report_rows(
            kind=report_kind, session_id=session.session_id if session else None, center=center
        )
        if not rows:
            raise NotFoundError("لا توجد بيانات للتصدير")

        return ExportFile(
            filename=exporter.report_filename(report_kind, center=center, session=session, today=today_local()),
            content=exporter.export_report(report_kind, rows),
        )

    def export_center_roster(self, center: str) -> ExportFile:
        center = (center or "").strip()
        students = self._students.list_by_center(center) if center else []
        if not students:
            raise NotFoundError(f"No students found for center: {center}")

        return ExportFile(filename=exporter.roster_filename(center), content=exporter.export_roster(center, students))
