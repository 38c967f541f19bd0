from __future__ import annotations

import io
import re
from datetime import date
from typing import Optional, Sequence

import pandas as pd
from openpyxl.styles import Alignment, Border, Font, Side
from openpyxl.utils import get_column_letter

from ..core.constants import ALL_LABEL
from ..core.enums import ReportKind
from ..records.model import RecordReportRow
from ..sessions.model import Session
from ..students.model import Student

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# (header, width)
REPORT_COLUMNS = [
    ("كود الطالب", 15),
    ("الاسم الكامل", 30),
    ("رقم الهاتف", 15),
    ("رقم ولي الأمر", 15),
    ("السنتر / المجموعة", 20),
]
GRADE_COLUMN = ("الدرجة", 10)

ROSTER_COLUMNS = [
    ("كود الطالب", 15),
    ("اسم الطالب", 30),
    ("رقم الطالب", 15),
    ("رقم ولي الامر", 15),
    ("الشعبة", 15),
    ("النوع", 10),
]

_SHEET_NAME_FORBIDDEN = re.compile(r"[\[\]:*?/\\]")

_THIN = Side(style="thin")
_BORDER = Border(left=_THIN, right=_THIN, top=_THIN, bottom=_THIN)
_ALIGN = Alignment(horizontal="center", vertical="center", wrap_text=True)


def _or_dash(value: Optional[str]) -> str:
    return value or "-"


def report_filename(kind: ReportKind, *, center: Optional[str], session: Optional[Session], today: date) -> str:
    session_name = session.display_name if session else ALL_LABEL
    return f"{center or ALL_LABEL} {session_name} {kind.label} {today.strftime('%Y-%m-%d')}.xlsx"


def roster_filename(center: str) -> str:
    return f"بيانات سنتر {center}.xlsx"


def report_frame(kind: ReportKind, rows: Sequence[RecordReportRow]) -> pd.DataFrame:
    columns = list(REPORT_COLUMNS)
    if kind is ReportKind.GRADES:
        columns.append(GRADE_COLUMN)

    data = []
    for r in rows:
        values = [
            _or_dash(r.student_id),
            r.full_name or "N/A",
            _or_dash(r.phone_number),
            _or_dash(r.parent_phone_number),
            _or_dash(r.student_main_center),
        ]
        if kind is ReportKind.GRADES:
            values.append(r.record.grade)
        data.append(values)
    return pd.DataFrame(data, columns=[h for h, _ in columns])


def roster_frame(students: Sequence[Student]) -> pd.DataFrame:
    data = [
        [
            s.student_id,
            s.full_name,
            s.phone_number,
            s.parent_phone_number or "",
            s.division.label if s.division else "",
            s.gender.label if s.gender else "",
        ]
        for s in students
    ]
    return pd.DataFrame(data, columns=[h for h, _ in ROSTER_COLUMNS])


def to_xlsx_bytes(df: pd.DataFrame, *, sheet_name: str, widths: Sequence[int]) -> bytes:
    """Write one styled sheet: bordered centred cells, bold tall header row."""

    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name)
        ws = writer.sheets[sheet_name]

        for row in ws.iter_rows(min_row=1, max_row=ws.max_row, max_col=len(df.columns)):
            for cell in row:
                cell.border = _BORDER
                cell.alignment = _ALIGN
        for cell in ws[1]:
            cell.font = Font(bold=True, size=14)
        ws.row_dimensions[1].height = 60

        for idx, width in enumerate(widths, start=1):
            ws.column_dimensions[get_column_letter(idx)].width = width

    return output.getvalue()


def export_report(kind: ReportKind, rows: Sequence[RecordReportRow]) -> bytes:
    widths = [w for _, w in REPORT_COLUMNS]
    if kind is ReportKind.GRADES:
        widths.append(GRADE_COLUMN[1])
    return to_xlsx_bytes(report_frame(kind, rows), sheet_name="Report", widths=widths)


def export_roster(center: str, students: Sequence[Student]) -> bytes:
    # Excel caps sheet names at 31 characters and rejects a few symbols.
    sheet_name = _SHEET_NAME_FORBIDDEN.sub(" ", f"بيانات سنتر {center}")[:31]
    return to_xlsx_bytes(roster_frame(students), sheet_name=sheet_name, widths=[w for _, w in ROSTER_COLUMNS])
