"""Workbook reading for imports.

Turns exported sheets back into plain rows of (key, header, text, colour
state). Never touches the host document and never modifies the workbook.
"""

from __future__ import annotations

import logging
import zipfile
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from paramlink.excel.config import (
    DATA_START_ROW,
    FIRST_PARAM_COL,
    HEADER_FILL,
    HEADER_ROW,
    KEY_COL,
    LEGEND_SHEET_NAME,
    SCHEDULE_TITLE_ROW,
    SUMMARY_FILL,
    sheet_name_matches,
)
from paramlink.excel.errors import HostFileLocked, WorkbookError
from paramlink.excel.grid import HeaderCell
from paramlink.excel.palette import CellState, classify_cell, fill_rgb
from paramlink.excel.writer import ensure_not_locked

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportCell:
    column: int
    header: str
    text: str
    state: CellState

    @property
    def is_empty(self) -> bool:
        return not self.text.strip()


@dataclass(frozen=True)
class ImportRow:
    row: int
    key: str
    cells: tuple[ImportCell, ...]


@dataclass(frozen=True)
class ImportSheet:
    name: str
    rows: tuple[ImportRow, ...]

    @property
    def row_count(self) -> int:
        return len(self.rows)


def _cell_text(value: Any) -> str:
    """Cell value as text, e.g. 12.0 -> '12', None -> ''."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _open(file_path: str | Path):
    path = Path(file_path)
    ensure_not_locked(path)
    try:
        return openpyxl.load_workbook(str(path), data_only=True, read_only=True)
    except PermissionError as e:
        raise HostFileLocked(str(path)) from e
    except (OSError, InvalidFileException, zipfile.BadZipFile, KeyError) as e:
        raise WorkbookError(f"Could not open workbook {path}: {e}") from e


def _data_row(row_idx: int, row: tuple, headers: dict[int, str]) -> ImportRow | None:
    if len(row) < KEY_COL or row[KEY_COL - 1].value is None:
        return None
    key = _cell_text(row[KEY_COL - 1].value).strip()
    if not key:
        return None
    cells = []
    for col in range(FIRST_PARAM_COL, len(row) + 1):
        cell = row[col - 1]
        cells.append(
            ImportCell(
                column=col,
                header=headers.get(col, ""),
                text=_cell_text(getattr(cell, "value", None)),
                state=classify_cell(cell),
            )
        )
    return ImportRow(row=row_idx, key=key, cells=tuple(cells))


class ExcelReader:
    """Reads exported workbooks back into ImportSheet values."""

    @staticmethod
    def sheet_names(file_path: str | Path) -> list[str]:
        wb = _open(file_path)
        try:
            return [n for n in wb.sheetnames if n != LEGEND_SHEET_NAME]
        finally:
            wb.close()

    @staticmethod
    def read_category_sheets(
        file_path: str | Path,
        categories: Iterable[str] | None = None,
    ) -> list[ImportSheet]:
        """Read every category sheet in workbook order.

        Args:
            file_path: Workbook to read.
            categories: When given, only sheets named after one of these
                categories (or its 31-character truncation) are read.

        Returns:
            One ImportSheet per sheet; cell headers hold the parameter name.
        """
        wanted = list(categories) if categories is not None else None
        wb = _open(file_path)
        try:
            sheets: list[ImportSheet] = []
            for name in wb.sheetnames:
                if name == LEGEND_SHEET_NAME:
                    continue
                if wanted is not None and not any(
                    sheet_name_matches(name, c) for c in wanted
                ):
                    logger.debug("Sheet '%s' not in category selection, skipped", name)
                    continue

                ws = wb[name]
                headers: dict[int, str] = {}
                rows: list[ImportRow] = []
                for row_idx, row in enumerate(
                    ws.iter_rows(min_row=HEADER_ROW), start=HEADER_ROW
                ):
                    if row_idx == HEADER_ROW:
                        for col, cell in enumerate(row, 1):
                            if col >= FIRST_PARAM_COL and cell.value is not None:
                                headers[col] = HeaderCell.parameter_name(str(cell.value))
                        continue
                    if row_idx < DATA_START_ROW:
                        continue
                    data = _data_row(row_idx, row, headers)
                    if data is not None:
                        rows.append(data)
                sheets.append(ImportSheet(name=name, rows=tuple(rows)))
            return sheets
        finally:
            wb.close()

    @staticmethod
    def read_schedule_sheets(file_path: str | Path) -> list[ImportSheet]:
        """Read every schedule sheet in workbook order.

        Leading rows filled with the header colour (title and headings) and
        rows filled with the summary colour are not data. A sheet without
        any header fill is read from row 2.
        """
        wb = _open(file_path)
        try:
            sheets: list[ImportSheet] = []
            for name in wb.sheetnames:
                if name == LEGEND_SHEET_NAME:
                    continue
                ws = wb[name]
                headers: dict[int, str] = {}
                rows: list[ImportRow] = []
                in_header = True
                for row_idx, row in enumerate(
                    ws.iter_rows(min_row=SCHEDULE_TITLE_ROW), start=SCHEDULE_TITLE_ROW
                ):
                    first = row[0] if row else None
                    rgb = fill_rgb(first) if first is not None else None
                    if in_header:
                        if rgb == HEADER_FILL:
                            if row_idx > SCHEDULE_TITLE_ROW:
                                headers = {
                                    col: _cell_text(cell.value)
                                    for col, cell in enumerate(row, 1)
                                }
                            continue
                        in_header = False
                        if row_idx == SCHEDULE_TITLE_ROW:
                            # No header fill at all: row 1 holds headings
                            headers = {
                                col: _cell_text(cell.value)
                                for col, cell in enumerate(row, 1)
                            }
                            continue
                    if rgb == SUMMARY_FILL:
                        continue
                    data = _data_row(row_idx, row, headers)
                    if data is not None:
                        rows.append(data)
                sheets.append(ImportSheet(name=name, rows=tuple(rows)))
            return sheets
        finally:
            wb.close()
