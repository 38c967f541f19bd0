from __future__ import annotations

import logging
import math
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Sequence

import pandas as pd
import xlrd
from xlrd.compdoc import CompDocError

from ..core.enums import UploadKind
from ..core.exceptions import EmptySheetError, HeaderMismatchError, NoSheetError, SpreadsheetError
from .headers import ATTENDANCE_HEADERS, GRADE_HEADERS, STUDENT_HEADER_SETS, HeaderSet
from .model import LogicalColumn, SheetRow

logger = logging.getLogger(__name__)

CSV_SUFFIXES = {".csv"}
EXCEL_SUFFIXES = {".xlsx", ".xls"}


@dataclass(frozen=True)
class NormalizedSheet:
    header_set: HeaderSet
    headers: list[str]
    rows: list[SheetRow]


def cell_text(value: Any) -> str:
    """Render one cell as trimmed text.

    Spreadsheet number cells arrive as floats; integral ones lose the ".0" so
    IDs keep their digits and a grade of 0 stays "0".
    """

    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, int):
        return str(value)
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        pass
    return str(value).strip()


def _fmt(headers: Sequence[str]) -> str:
    return ", ".join(headers)


class SpreadsheetNormalizer:
    """Read the first sheet of an upload, validate its headers and map rows to logical columns."""

    def __init__(self, *, strict_grade_headers: bool = False):
        self._strict_grade_headers = bool(strict_grade_headers)

    def read_table(self, path: str | Path) -> list[list[str]]:
        path = Path(path)
        suffix = path.suffix.lower()
        try:
            if suffix in CSV_SUFFIXES:
                frame = pd.read_csv(path, header=None, dtype=str, keep_default_na=False, encoding="utf-8-sig")
            else:
                sheets = pd.read_excel(path, sheet_name=None, header=None)
                if not sheets:
                    raise NoSheetError("Uploaded Excel file contains no sheets")
                frame = next(iter(sheets.values()))
        except pd.errors.EmptyDataError:
            raise EmptySheetError("The Excel sheet is empty")
        except (ValueError, OSError, KeyError, zipfile.BadZipFile, xlrd.XLRDError, CompDocError) as e:
            raise SpreadsheetError(f"Could not read the uploaded file: {e}") from e

        return [[cell_text(v) for v in row] for row in frame.itertuples(index=False, name=None)]

    def normalize(self, path: str | Path, kind: UploadKind) -> NormalizedSheet:
        table = self.read_table(path)
        if not table:
            raise EmptySheetError("The Excel sheet is empty")

        headers = [h.strip() for h in table[0]]
        header_set = self._match_headers(kind, headers)
        logger.info("Headers accepted for %s upload (set=%s): %s", kind.value, header_set.name, _fmt(headers))

        rows = self._map_rows(header_set, headers, table[1:])
        if not rows:
            raise EmptySheetError("The Excel sheet has no data rows under the header")
        return NormalizedSheet(header_set=header_set, headers=headers, rows=rows)

    def _match_headers(self, kind: UploadKind, headers: list[str]) -> HeaderSet:
        if kind is UploadKind.STUDENTS:
            return self._match_student_headers(headers)
        if kind in (UploadKind.ATTENDANCE, UploadKind.ISSUES):
            return self._require_all(ATTENDANCE_HEADERS, headers)
        if self._strict_grade_headers:
            return self._require_all(GRADE_HEADERS, headers)
        # Grade sheets are checked row by row: a missing grade/ID column
        # shows up as a row error, not a file error.
        return GRADE_HEADERS

    @staticmethod
    def _match_student_headers(headers: list[str]) -> HeaderSet:
        missing_by_set = [(hs, hs.missing_from(headers)) for hs in STUDENT_HEADER_SETS]
        for hs, missing in missing_by_set:
            if not missing:
                return hs

        _, closest_missing = min(missing_by_set, key=lambda pair: len(pair[1]))
        latin, arabic = STUDENT_HEADER_SETS
        raise HeaderMismatchError(
            "Missing required headers. Expected either:\n"
            f"English: {_fmt(latin.headers)}\n"
            f"Arabic: {_fmt(arabic.headers)}\n"
            f"Found: {_fmt(headers)}\n"
            f"Missing: {_fmt(closest_missing)}\n\n"
            "Note: Headers must match exactly (check for extra spaces)",
            expected=[hs.headers for hs in STUDENT_HEADER_SETS],
            found=headers,
            missing=closest_missing,
        )

    @staticmethod
    def _require_all(header_set: HeaderSet, headers: list[str]) -> HeaderSet:
        missing = header_set.missing_from(headers)
        if missing:
            raise HeaderMismatchError(
                f"Missing required headers:\n{_fmt(missing)}\n\n"
                f"Required headers are: {_fmt(header_set.headers)}\n"
                f"Found: {_fmt(headers)}\n\n"
                "Note: Headers must match exactly (check for extra spaces)",
                expected=[header_set.headers],
                found=headers,
                missing=missing,
            )
        return header_set

    @staticmethod
    def _map_rows(header_set: HeaderSet, headers: list[str], data: list[list[str]]) -> list[SheetRow]:
        # Resolved once: sheet position -> logical column (first occurrence wins).
        positions: dict[LogicalColumn, int] = {}
        for idx, header in enumerate(headers):
            col: Optional[LogicalColumn] = header_set.column_for(header)
            if col is not None and col not in positions:
                positions[col] = idx

        rows: list[SheetRow] = []
        for row_number, cells in enumerate(data, start=1):
            if not any(cells):
                continue
            values = {col: (cells[idx] if idx < len(cells) else "") for col, idx in positions.items()}
            rows.append(SheetRow.from_cells(row_number, values))
        return rows
