"""Workbook writing for category, schedule and error-report exports.

Writers only see GridSnapshot / ScheduleSnapshot values and never touch
the host document, so they can run in a worker thread.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path

import openpyxl
from openpyxl.styles import Alignment, Border, Font, Side
from openpyxl.utils import get_column_letter

from paramlink.excel.config import (
    DATA_START_ROW,
    ERROR_REPORT_HEADERS,
    ERROR_REPORT_SHEET,
    FIRST_PARAM_COL,
    HEADER_FILL,
    HEADER_ROW,
    HEADER_ROW_HEIGHT,
    KEY_COL,
    KEY_FILL,
    LEGEND_HEADER_FILL,
    LEGEND_SHEET_NAME,
    SCHEDULE_TITLE_ROW,
    SUMMARY_FILL,
)
from paramlink.excel.errors import ErrorRecord, HostFileLocked, WorkbookError
from paramlink.excel.grid import GridSnapshot, ScheduleSnapshot
from paramlink.excel.palette import LEGEND_ENTRIES, fill_for, solid_fill

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]

_THIN = Side(style="thin")
_BORDER = Border(left=_THIN, right=_THIN, top=_THIN, bottom=_THIN)
_BOLD = Font(bold=True)
_HEADER_ALIGN = Alignment(wrap_text=True, vertical="top")

# Legend sheet layout
_LEGEND_TITLE_ROW = 1
_LEGEND_TABLE_ROW = 3
_LEGEND_FIRST_COL = 2
_LEGEND_WIDTHS = (15, 30, 40)

# Column width bounds, in characters
_MIN_WIDTH = 8
_MAX_WIDTH = 60


class ProgressReporter:
    """Monotonic 0-100 progress, reported every `batch` items and at the end."""

    def __init__(
        self,
        total: int,
        callback: ProgressCallback | None = None,
        batch: int = 10,
    ) -> None:
        self.total = max(total, 0)
        self.done = 0
        self.last = 0
        self._callback = callback
        self._batch = max(batch, 1)

    def advance(self, count: int = 1) -> None:
        self.done += count
        if self.done % self._batch == 0 or self.done >= self.total:
            self._report(self._percent())

    def finish(self) -> None:
        self._report(100)

    def _percent(self) -> int:
        if self.total == 0:
            return 100
        return min(100, self.done * 100 // self.total)

    def _report(self, percent: int) -> None:
        if percent <= self.last:
            return
        self.last = percent
        if self._callback is not None:
            self._callback(percent)


def lock_file_for(path: Path) -> Path:
    """Owner file Excel keeps next to a workbook while it is open."""
    return path.parent / f"~${path.name}"


def ensure_not_locked(path: str | Path) -> None:
    """Raise HostFileLocked if the workbook is open in Excel."""
    path = Path(path)
    if lock_file_for(path).exists():
        raise HostFileLocked(str(path))


def _save(wb: openpyxl.Workbook, path: Path) -> None:
    ensure_not_locked(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        wb.save(str(path))
    except PermissionError as e:
        raise HostFileLocked(str(path)) from e
    except OSError as e:
        raise WorkbookError(f"Could not save workbook {path}: {e}") from e


def _autofit(ws, widths: dict[int, int]) -> None:
    for col, width in widths.items():
        ws.column_dimensions[get_column_letter(col)].width = max(
            _MIN_WIDTH, min(_MAX_WIDTH, width + 2)
        )


def _text_cell(ws, row: int, column: int, text: str | None):
    """Write element text as a literal string; a leading "=" is not a formula."""
    cell = ws.cell(row=row, column=column, value=text)
    if isinstance(text, str):
        cell.data_type = "s"
    return cell


def _track_width(widths: dict[int, int], col: int, text: str) -> None:
    longest = max((len(line) for line in text.split("\n")), default=0)
    if longest > widths.get(col, 0):
        widths[col] = longest


class ExcelWriter:
    """Writes exported snapshots to .xlsx files."""

    @staticmethod
    def write_legend_sheet(ws, title: str = LEGEND_SHEET_NAME) -> None:
        """Fill a worksheet with the colour legend table."""
        ws.title = LEGEND_SHEET_NAME
        first, last = _LEGEND_FIRST_COL, _LEGEND_FIRST_COL + 2

        ws.merge_cells(
            start_row=_LEGEND_TITLE_ROW,
            start_column=first,
            end_row=_LEGEND_TITLE_ROW,
            end_column=last,
        )
        title_cell = ws.cell(row=_LEGEND_TITLE_ROW, column=first, value=title)
        title_cell.font = Font(bold=True, size=14)
        title_cell.alignment = Alignment(horizontal="center")

        row = _LEGEND_TABLE_ROW
        for offset, label in enumerate(("Color", "Description", "Notes")):
            cell = ws.cell(row=row, column=first + offset, value=label)
            cell.font = _BOLD
            cell.fill = solid_fill(LEGEND_HEADER_FILL)
            cell.border = _BORDER

        entries = [(fill_for(state), desc, notes) for state, desc, notes in LEGEND_ENTRIES]
        entries.append(
            (solid_fill(HEADER_FILL), "Header Row", "Column headers, never imported")
        )
        entries.append(
            (solid_fill(SUMMARY_FILL), "Summary/Total Row", "Grand totals, never imported")
        )
        for fill, description, notes in entries:
            row += 1
            swatch = ws.cell(row=row, column=first)
            swatch.fill = fill
            ws.cell(row=row, column=first + 1, value=description)
            ws.cell(row=row, column=first + 2, value=notes)
            for col in range(first, last + 1):
                ws.cell(row=row, column=col).border = _BORDER

        for offset, width in enumerate(_LEGEND_WIDTHS):
            ws.column_dimensions[get_column_letter(first + offset)].width = width

    @staticmethod
    def write_category_sheet(
        ws, grid: GridSnapshot, progress: ProgressReporter | None = None
    ) -> None:
        """Write one category grid: key column A, one parameter per column."""
        ws.title = grid.sheet_name
        widths: dict[int, int] = {}

        key_header = _text_cell(ws, HEADER_ROW, KEY_COL, grid.key_header)
        _track_width(widths, KEY_COL, grid.key_header)
        header_cells = [key_header]
        for offset, header in enumerate(grid.headers):
            col = FIRST_PARAM_COL + offset
            cell = _text_cell(ws, HEADER_ROW, col, header.text)
            _track_width(widths, col, header.text)
            header_cells.append(cell)
        for cell in header_cells:
            cell.font = _BOLD
            cell.fill = solid_fill(HEADER_FILL)
            cell.alignment = _HEADER_ALIGN
            cell.border = _BORDER
        ws.row_dimensions[HEADER_ROW].height = HEADER_ROW_HEIGHT

        key_fill = solid_fill(KEY_FILL)
        for index, grid_row in enumerate(grid.rows):
            row = DATA_START_ROW + index
            key_cell = _text_cell(ws, row, KEY_COL, grid_row.key)
            key_cell.fill = key_fill
            key_cell.border = _BORDER
            for offset, (value, state) in enumerate(zip(grid_row.values, grid_row.states)):
                col = FIRST_PARAM_COL + offset
                cell = _text_cell(ws, row, col, value)
                cell.fill = fill_for(state)
                cell.border = _BORDER
                _track_width(widths, col, value)
            if progress is not None:
                progress.advance()

        last_col = get_column_letter(FIRST_PARAM_COL + len(grid.headers) - 1)
        last_row = max(HEADER_ROW, DATA_START_ROW + grid.row_count - 1)
        ws.auto_filter.ref = f"A{HEADER_ROW}:{last_col}{last_row}"
        ws.freeze_panes = ws.cell(row=DATA_START_ROW, column=FIRST_PARAM_COL)
        _autofit(ws, widths)

    @staticmethod
    def write_schedule_sheet(
        ws, snapshot: ScheduleSnapshot, progress: ProgressReporter | None = None
    ) -> None:
        """Write one schedule: title row, optional headings, body, summary."""
        ws.title = snapshot.sheet_name
        width = max(len(snapshot.column_states), 1)
        widths: dict[int, int] = {}
        header_fill = solid_fill(HEADER_FILL)

        title = _text_cell(ws, SCHEDULE_TITLE_ROW, 1, snapshot.name)
        title.font = _BOLD
        for col in range(1, width + 1):
            ws.cell(row=SCHEDULE_TITLE_ROW, column=col).fill = header_fill

        row = SCHEDULE_TITLE_ROW + 1
        if snapshot.include_headers and snapshot.headers:
            for col, text in enumerate(snapshot.headers, 1):
                cell = _text_cell(ws, row, col, text)
                cell.font = _BOLD
                cell.fill = header_fill
                cell.border = _BORDER
                _track_width(widths, col, text)
            row += 1

        for body_row in snapshot.body:
            for col, (text, state) in enumerate(zip(body_row, snapshot.column_states), 1):
                cell = _text_cell(ws, row, col, text)
                cell.fill = fill_for(state)
                cell.border = _BORDER
                _track_width(widths, col, text)
            row += 1
            if progress is not None:
                progress.advance()

        summary_fill = solid_fill(SUMMARY_FILL)
        for summary_row in snapshot.summary:
            for col, text in enumerate(summary_row, 1):
                cell = _text_cell(ws, row, col, text)
                cell.font = _BOLD
                cell.fill = summary_fill
                cell.border = _BORDER
            row += 1

        _autofit(ws, widths)

    @staticmethod
    def write_category_workbook(
        file_path: str | Path,
        grids: Sequence[GridSnapshot],
        progress_callback: ProgressCallback | None = None,
        batch_rows: int = 10,
    ) -> int:
        """Write the legend plus one sheet per grid.

        Returns:
            Number of data rows written.

        Raises:
            HostFileLocked: The target is open in Excel.
            WorkbookError: The file could not be saved.
        """
        path = Path(file_path)
        ensure_not_locked(path)
        progress = ProgressReporter(
            sum(g.row_count for g in grids), progress_callback, batch_rows
        )

        wb = openpyxl.Workbook()
        try:
            ExcelWriter.write_legend_sheet(wb.active)
            for grid in grids:
                ExcelWriter.write_category_sheet(wb.create_sheet(), grid, progress)
            _save(wb, path)
        finally:
            wb.close()

        progress.finish()
        logger.info("Wrote %d category sheets (%d rows) to %s", len(grids), progress.done, path)
        return progress.done

    @staticmethod
    def write_schedule_workbook(
        file_path: str | Path,
        snapshots: Sequence[ScheduleSnapshot],
        progress_callback: ProgressCallback | None = None,
        batch_rows: int = 10,
    ) -> int:
        """Write the legend plus one sheet per schedule snapshot."""
        path = Path(file_path)
        ensure_not_locked(path)
        progress = ProgressReporter(
            sum(s.row_count for s in snapshots), progress_callback, batch_rows
        )

        wb = openpyxl.Workbook()
        try:
            ExcelWriter.write_legend_sheet(wb.active, "Schedule Export Color Legend")
            for snapshot in snapshots:
                ExcelWriter.write_schedule_sheet(wb.create_sheet(), snapshot, progress)
            _save(wb, path)
        finally:
            wb.close()

        progress.finish()
        logger.info(
            "Wrote %d schedule sheets (%d rows) to %s", len(snapshots), progress.done, path
        )
        return progress.done

    @staticmethod
    def write_error_report(file_path: str | Path, errors: Iterable[ErrorRecord]) -> int:
        """Save import errors as a two-column workbook.

        Returns:
            Number of error rows written.
        """
        path = Path(file_path)
        ensure_not_locked(path)

        wb = openpyxl.Workbook()
        count = 0
        try:
            ws = wb.active
            ws.title = ERROR_REPORT_SHEET
            widths: dict[int, int] = {}
            for col, header in enumerate(ERROR_REPORT_HEADERS, 1):
                cell = ws.cell(row=1, column=col, value=header)
                cell.font = _BOLD
                cell.fill = solid_fill(LEGEND_HEADER_FILL)
                _track_width(widths, col, header)
            for row, record in enumerate(errors, 2):
                _text_cell(ws, row, 1, record.key)
                _text_cell(ws, row, 2, record.description)
                _track_width(widths, 1, record.key)
                _track_width(widths, 2, record.description)
                count += 1
            _autofit(ws, widths)
            _save(wb, path)
        finally:
            wb.close()

        logger.info("Wrote error report with %d entries to %s", count, path)
        return count
