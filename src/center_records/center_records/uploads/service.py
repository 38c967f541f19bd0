from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from ..common.locks import SessionLocks
from ..common.permissions import require_admin
from ..core.constants import NO_GRADE
from ..core.enums import AttendanceStatus, Role, UploadKind
from ..core.exceptions import PreconditionError
from ..records.model import NewRecord, RecordState
from ..records.repository import RecordRepository
from ..sessions.model import Session
from ..sessions.repository import SessionRepository
from ..students.repository import StudentRepository
from .factory import RowProcessorFactory
from .files import discard_when_done
from .model import RowResult, UploadSummary
from .normalizer import SpreadsheetNormalizer
from .processors.base import RowContext

logger = logging.getLogger(__name__)


class UploadService:
    """Reconcile one uploaded sheet against the roster and a session's records.

    Steps: check preconditions, normalize the sheet, run every row through
    its processor, then the kind's post-pass. Row failures are collected in
    the summary; precondition and sheet failures abort before any row is
    written. The uploaded file is deleted whatever happens.
    """

    def __init__(
        self,
        *,
        students: StudentRepository,
        sessions: SessionRepository,
        records: RecordRepository,
        normalizer: Optional[SpreadsheetNormalizer] = None,
        factory: Optional[RowProcessorFactory] = None,
        locks: Optional[SessionLocks] = None,
    ):
        self._students = students
        self._sessions = sessions
        self._records = records
        self._normalizer = normalizer or SpreadsheetNormalizer()
        self._factory = factory or RowProcessorFactory(students=students, records=records)
        self._locks = locks or SessionLocks()

    def process_upload(
        self,
        file_path: str | Path,
        upload_kind: str | UploadKind,
        *,
        current_role: Role,
        session_id: Optional[object] = None,
        center: Optional[str] = None,
    ) -> UploadSummary:
        with discard_when_done(file_path) as path:
            require_admin(current_role)
            kind = self._parse_kind(upload_kind)
            center = (center or "").strip() or None

            logger.info(
                "Upload started: kind=%s session=%s center=%s file=%s", kind.value, session_id, center, path.name
            )

            if kind.requires_center and not center:
                raise PreconditionError("Center is required for attendance uploads")
            session = self._resolve_session(session_id) if kind.requires_session else None

            sheet = self._normalizer.normalize(path, kind)

            ctx = RowContext(kind=kind, center=center, session=session)
            with self._locks.hold(session.session_id if session else None):
                summary = self._process_rows(sheet.rows, ctx)

                if kind is UploadKind.ATTENDANCE:
                    summary.absent_marked = self.mark_remaining_absent(session, center)
                elif kind is UploadKind.GRADES:
                    summary.grades_defaulted = self.default_missing_grades(session)

            logger.info(
                "Upload finished: kind=%s processed=%s created=%s updated=%s errors=%s",
                kind.value,
                summary.processed,
                summary.created,
                summary.updated,
                len(summary.errors),
            )
            return summary

    def mark_remaining_absent(self, session: Session, center: str) -> int:
        """Give every home-center student without a record for the session an absent one."""

        students = self._students.list_by_center(center)
        if not students:
            logger.info("No students registered at %s; nothing to mark absent", center)
            return 0

        # Any center counts: a student may have attended elsewhere as a makeup.
        have_record = self._records.list_student_pks_for_session(session.session_id)
        missing = [
            NewRecord(
                student_pk=s.student_pk,
                session_id=session.session_id,
                state=RecordState(
                    center=s.main_center,
                    main_center=s.main_center,
                    attendance=AttendanceStatus.ABSENT,
                    grade=NO_GRADE,
                ),
            )
            for s in students
            if s.student_pk not in have_record
        ]
        inserted = self._records.bulk_insert(missing) if missing else 0
        logger.info("Marked %s students absent at %s for week %s", inserted, center, session.week_number)
        return inserted

    def default_missing_grades(self, session: Session) -> int:
        updated = self._records.set_grade_where_missing(session.session_id, NO_GRADE)
        logger.info("Defaulted %s missing grades for week %s", updated, session.week_number)
        return updated

    def _process_rows(self, rows, ctx: RowContext) -> UploadSummary:
        processor = self._factory.for_kind(ctx.kind)
        summary = UploadSummary(kind=ctx.kind)

        for row in rows:
            try:
                result = processor.process(row, ctx)
            except Exception as e:
                logger.exception("Unexpected error on row %s", row.row_number)
                result = RowResult.error(row.id, str(e) or e.__class__.__name__)

            if result.is_error:
                logger.warning("Row %s (id=%s) failed: %s", row.row_number, result.student_id, result.message)
            summary.add(row.row_number, result)
        return summary

    @staticmethod
    def _parse_kind(upload_kind: str | UploadKind) -> UploadKind:
        try:
            return UploadKind(str(getattr(upload_kind, "value", upload_kind) or "").strip().lower())
        except ValueError:
            allowed = ", ".join(k.value for k in UploadKind)
            raise PreconditionError(f"Invalid upload type: {upload_kind}. Allowed: {allowed}")

    def _resolve_session(self, session_id: Optional[object]) -> Session:
        raw = "" if session_id is None else str(session_id).strip()
        if not raw:
            raise PreconditionError("Session ID is required for this upload type")
        try:
            sid = int(raw)
        except ValueError:
            raise PreconditionError(f"Invalid session ID: {raw}")

        session = self._sessions.get_by_id(sid)
        if not session:
            raise PreconditionError("Session not found")
        return session
