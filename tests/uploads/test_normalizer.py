from __future__ import annotations

import pytest
import xlrd
from openpyxl import Workbook
from xlrd.compdoc import CompDocError

from src.center_records.center_records.core.enums import UploadKind
from src.center_records.center_records.core.exceptions import (
    EmptySheetError,
    HeaderMismatchError,
    SpreadsheetError,
)
from src.center_records.center_records.uploads.headers import (
    ATTENDANCE_HEADERS,
    GRADE_HEADERS,
    STUDENT_HEADERS_ARABIC,
    STUDENT_HEADERS_LATIN,
)
from src.center_records.center_records.uploads import normalizer as normalizer_module
from src.center_records.center_records.uploads.normalizer import SpreadsheetNormalizer, cell_text

LATIN = STUDENT_HEADERS_LATIN.headers
ARABIC = STUDENT_HEADERS_ARABIC.headers


def test_cell_text_drops_trailing_zero_of_integral_floats():
    assert cell_text(12345678901.0) == "12345678901"
    assert cell_text(0.0) == "0"
    assert cell_text(7.5) == "7.5"
    assert cell_text(float("nan")) == ""
    assert cell_text(None) == ""
    assert cell_text("  Ali  ") == "Ali"


def test_latin_and_arabic_student_headers_map_to_same_logical_row(write_xlsx):
    row = ["12345678901", "Ahmed Ali", "01012345678", "01198765432", "ذكر", "أزهر"]
    normalizer = SpreadsheetNormalizer()

    latin = normalizer.normalize(write_xlsx(LATIN, [row]), UploadKind.STUDENTS)
    arabic = normalizer.normalize(write_xlsx(ARABIC, [row]), UploadKind.STUDENTS)

    assert latin.header_set.name == "latin"
    assert arabic.header_set.name == "arabic"
    assert latin.rows == arabic.rows
    assert latin.rows[0].id == "12345678901"
    assert latin.rows[0].student_name == "Ahmed Ali"
    assert latin.rows[0].division == "أزهر"


def test_student_headers_with_surrounding_spaces_are_trimmed(write_xlsx):
    headers = [f" {h} " for h in LATIN]
    sheet = SpreadsheetNormalizer().normalize(
        write_xlsx(headers, [["12345678901", "Mona Adel", "01012345678", "", "", ""]]), UploadKind.STUDENTS
    )
    assert sheet.rows[0].student_name == "Mona Adel"


def test_mixed_student_headers_fail_with_missing_columns(write_xlsx):
    # Latin set with the Arabic phone header: neither set fully matches.
    headers = ["ID", "Student Name", "رقم الطالب", "Parent Phone", "Gender", "Division"]
    path = write_xlsx(headers, [["12345678901", "Ahmed Ali", "01012345678", "", "", ""]])

    with pytest.raises(HeaderMismatchError) as exc:
        SpreadsheetNormalizer().normalize(path, UploadKind.STUDENTS)

    assert exc.value.missing == ["Student Phone"]
    assert exc.value.expected == [LATIN, ARABIC]
    assert "رقم الطالب" in exc.value.found


def test_partial_student_headers_fail(write_xlsx):
    path = write_xlsx(["ID", "Student Name"], [["12345678901", "Ahmed Ali"]])
    with pytest.raises(HeaderMismatchError) as exc:
        SpreadsheetNormalizer().normalize(path, UploadKind.STUDENTS)
    assert "Student Phone" in exc.value.missing


def test_attendance_headers_may_carry_extra_columns(write_xlsx):
    headers = ATTENDANCE_HEADERS.headers + ["ملاحظات"]
    path = write_xlsx(headers, [["01198765432", "01012345678", "Ahmed Ali", "12345678901", "late"]])

    sheet = SpreadsheetNormalizer().normalize(path, UploadKind.ATTENDANCE)

    assert sheet.rows[0].id == "12345678901"
    assert sheet.rows[0].parent_phone == "01198765432"


@pytest.mark.parametrize("kind", [UploadKind.ATTENDANCE, UploadKind.ISSUES])
def test_attendance_and_issue_sheets_name_missing_headers(write_xlsx, kind):
    path = write_xlsx(["اسم الطالب", "كود الطالب"], [["Ahmed Ali", "12345678901"]])
    with pytest.raises(HeaderMismatchError) as exc:
        SpreadsheetNormalizer().normalize(path, kind)
    assert exc.value.missing == ["رقم ولي الامر", "رقم الطالب"]


def test_grade_headers_are_checked_per_row_by_default(write_xlsx):
    path = write_xlsx(["كود الطالب", "اسم الطالب"], [["12345678901", "Ahmed Ali"]])

    sheet = SpreadsheetNormalizer().normalize(path, UploadKind.GRADES)

    assert sheet.rows[0].id == "12345678901"
    assert sheet.rows[0].grade == ""


def test_strict_grade_headers_fail_up_front(write_xlsx):
    path = write_xlsx(["كود الطالب", "اسم الطالب"], [["12345678901", "Ahmed Ali"]])
    with pytest.raises(HeaderMismatchError) as exc:
        SpreadsheetNormalizer(strict_grade_headers=True).normalize(path, UploadKind.GRADES)
    assert "الدرجة" in exc.value.missing


def test_numeric_grade_and_id_cells_keep_their_text(write_xlsx):
    path = write_xlsx(GRADE_HEADERS.headers, [["", "", "Ahmed Ali", 12345678901, 0], ["", "", "Mona", 12345678902, 9.5]])

    rows = SpreadsheetNormalizer().normalize(path, UploadKind.GRADES).rows

    assert [(r.id, r.grade) for r in rows] == [("12345678901", "0"), ("12345678902", "9.5")]


def test_header_only_sheet_is_empty(write_xlsx):
    path = write_xlsx(LATIN, [])
    with pytest.raises(EmptySheetError):
        SpreadsheetNormalizer().normalize(path, UploadKind.STUDENTS)


def test_blank_workbook_is_empty(tmp_path):
    path = tmp_path / "blank.xlsx"
    Workbook().save(path)
    with pytest.raises(EmptySheetError):
        SpreadsheetNormalizer().normalize(path, UploadKind.STUDENTS)


def test_csv_blank_rows_are_skipped_but_counted(write_csv):
    rows = [
        ["12345678901", "Ahmed Ali", "01012345678", "", "", ""],
        ["", "", "", "", "", ""],
        ["12345678902", "Mona Adel", "01012345679", "", "", ""],
    ]
    sheet = SpreadsheetNormalizer().normalize(write_csv(LATIN, rows), UploadKind.STUDENTS)

    assert [(r.row_number, r.id) for r in sheet.rows] == [(1, "12345678901"), (3, "12345678902")]


def test_csv_keeps_leading_zeros(write_csv):
    path = write_csv(ATTENDANCE_HEADERS.headers, [["01198765432", "01012345678", "Ahmed", "01234567890"]])
    sheet = SpreadsheetNormalizer().normalize(path, UploadKind.ATTENDANCE)
    assert sheet.rows[0].id == "01234567890"
    assert sheet.rows[0].student_phone == "01012345678"


def test_unreadable_file_is_a_spreadsheet_error(tmp_path):
    path = tmp_path / "broken.xlsx"
    path.write_bytes(b"this is not a workbook")
    with pytest.raises(SpreadsheetError):
        SpreadsheetNormalizer().normalize(path, UploadKind.STUDENTS)


def test_empty_csv_is_empty(tmp_path):
    path = tmp_path / "empty.csv"
    path.write_text("", encoding="utf-8")
    with pytest.raises(EmptySheetError):
        SpreadsheetNormalizer().normalize(path, UploadKind.ATTENDANCE)


@pytest.mark.parametrize("error", [xlrd.XLRDError("Unsupported format"), CompDocError("Not a workbook")])
def test_legacy_xls_read_failures_are_spreadsheet_errors(tmp_path, monkeypatch, error):
    path = tmp_path / "legacy.xls"
    path.write_bytes(b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1" + b"\x00" * 504)

    def fail(*args, **kwargs):
        raise error

    monkeypatch.setattr(normalizer_module.pd, "read_excel", fail)
    with pytest.raises(SpreadsheetError):
        SpreadsheetNormalizer().normalize(path, UploadKind.ATTENDANCE)
