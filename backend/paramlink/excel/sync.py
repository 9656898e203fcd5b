"""Export/import orchestration.

SyncManager methods run in the workbook worker. All host access goes
through a bridge (HostBridge from a worker thread, DirectBridge inline), so
the workbook never stays open while the host is busy and vice versa.
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from paramlink.excel.config import CATEGORY_IMPORT_TRANSACTION, SCHEDULE_IMPORT_TRANSACTION
from paramlink.excel.errors import ErrorRecord, HostTransactionFailure, WorkbookError
from paramlink.excel.exporter import CategoryExporter
from paramlink.excel.host import HostDocument
from paramlink.excel.importer import ImportStats, ParameterImporter
from paramlink.excel.reader import ExcelReader, ImportSheet
from paramlink.excel.schedule import ScheduleExtractor
from paramlink.excel.writer import ExcelWriter, ProgressReporter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncResult:
    """Result of an export or import operation."""

    success: bool
    records_processed: int = 0
    updated_elements: int = 0
    cells_written: int = 0
    cells_skipped: int = 0
    cells_unchanged: int = 0
    errors: list[ErrorRecord] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    message: str | None = None
    file_path: str | None = None

    @classmethod
    def failed(cls, message: str, warnings: list[str] | None = None) -> "SyncResult":
        return cls(success=False, message=message, warnings=warnings or [])

    @classmethod
    def from_stats(
        cls, stats: ImportStats, warnings: list[str], file_path: str | None = None
    ) -> "SyncResult":
        return cls(
            success=True,
            records_processed=stats.rows_processed,
            updated_elements=stats.updated_elements,
            cells_written=stats.cells_written,
            cells_skipped=stats.cells_skipped,
            cells_unchanged=stats.cells_unchanged,
            errors=list(stats.errors),
            warnings=warnings,
            file_path=file_path,
        )

    def summary(self, preview_lines: int = 10) -> str:
        """User-facing outcome text.

        Plain success, success with counts and the first `preview_lines`
        errors, or the single reason the operation was aborted.
        """
        if not self.success:
            return self.message or "Operation failed"
        counts = (
            f"{self.records_processed} rows processed, "
            f"{self.updated_elements} elements updated."
        )
        if not self.errors:
            return f"Completed successfully. {counts}"
        lines = [f"Completed with {len(self.errors)} errors. {counts}"]
        for record in self.errors[:preview_lines]:
            lines.append(f"{record.key}: {record.description}")
        hidden = len(self.errors) - preview_lines
        if hidden > 0:
            lines.append(f"... and {hidden} more. Save the error report for the full list.")
        return "\n".join(lines)


def _start(document: HostDocument, name: str) -> None:
    document.start_transaction(name)


def _commit(document: HostDocument) -> None:
    document.commit_transaction()


def _rollback(document: HostDocument) -> None:
    document.rollback_transaction()


def _build_category_grids(
    document: HostDocument,
    categories: Sequence[str],
    parameters: Sequence[str],
    view_id: int | None,
):
    return CategoryExporter(document).build_grids(categories, parameters, view_id)


class SyncManager:
    """Runs export and import operations against a host bridge."""

    @staticmethod
    def compute_file_hash(file_path: str | Path) -> str:
        """Compute SHA-256 hash of a workbook, recorded in the sync log."""
        sha256 = hashlib.sha256()
        with open(str(file_path), "rb") as f:
            for chunk in iter(lambda: f.read(8192), b""):
                sha256.update(chunk)
        return sha256.hexdigest()

    @staticmethod
    def export_categories(
        bridge: Any,
        file_path: str | Path,
        categories: Sequence[str],
        parameters: Sequence[str],
        view_id: int | None = None,
        batch_rows: int = 10,
    ) -> SyncResult:
        """Export one sheet per category, plus the colour legend.

        Args:
            view_id: Limit to elements visible in this view; None exports
                the entire model.
        """
        logger.info(
            "Exporting %d categories x %d parameters to %s",
            len(categories), len(parameters), file_path,
        )
        grids, warnings = bridge.call(
            _build_category_grids, list(categories), list(parameters), view_id
        )
        if not grids:
            return SyncResult.failed(
                "No elements found for the selected categories", warnings
            )
        try:
            rows = ExcelWriter.write_category_workbook(
                file_path, grids, bridge.progress, batch_rows
            )
        except WorkbookError as e:
            logger.error("Export to %s failed: %s", file_path, e)
            return SyncResult.failed(str(e), warnings)
        return SyncResult(
            success=True,
            records_processed=rows,
            warnings=warnings,
            file_path=str(file_path),
        )

    @staticmethod
    def export_schedules(
        bridge: Any,
        file_path: str | Path,
        schedules: Sequence[str],
        include_headers: bool = True,
        include_grand_totals: bool = True,
        batch_rows: int = 10,
    ) -> SyncResult:
        """Export one sheet per schedule, plus the colour legend."""
        logger.info("Exporting %d schedules to %s", len(schedules), file_path)
        snapshots, warnings = bridge.call(
            ScheduleExtractor.extract,
            list(schedules),
            include_headers,
            include_grand_totals,
        )
        if not snapshots:
            return SyncResult.failed("None of the selected schedules were found", warnings)
        try:
            rows = ExcelWriter.write_schedule_workbook(
                file_path, snapshots, bridge.progress, batch_rows
            )
        except WorkbookError as e:
            logger.error("Schedule export to %s failed: %s", file_path, e)
            return SyncResult.failed(str(e), warnings)
        return SyncResult(
            success=True,
            records_processed=rows,
            warnings=warnings,
            file_path=str(file_path),
        )

    @staticmethod
    def _run_import(
        bridge: Any,
        sheets: list[ImportSheet],
        transaction_name: str,
        apply_sheet,
        batch_rows: int,
    ) -> tuple[ImportStats, list[str]]:
        """Apply every sheet inside one host transaction.

        The transaction is committed once at the end whatever the number of
        recorded errors; it is rolled back only if the operation aborts.
        """
        stats = ImportStats()
        warnings: list[str] = []
        progress = ProgressReporter(
            sum(s.row_count for s in sheets), bridge.progress, batch_rows
        )

        bridge.call(_start, transaction_name)
        try:
            for sheet in sheets:
                apply_sheet(sheet, stats, warnings, progress)
            bridge.call(_commit)
        except BaseException:
            try:
                bridge.call(_rollback)
            except HostTransactionFailure:
                logger.exception("Rollback of '%s' failed", transaction_name)
            raise
        progress.finish()
        return stats, warnings

    @staticmethod
    def import_categories(
        bridge: Any,
        file_path: str | Path,
        categories: Sequence[str] | None = None,
        parameters: Sequence[str] | None = None,
        batch_rows: int = 10,
    ) -> SyncResult:
        """Write editable cells of category sheets back to the elements."""
        try:
            sheets = ExcelReader.read_category_sheets(file_path, categories)
        except WorkbookError as e:
            logger.error("Could not read %s: %s", file_path, e)
            return SyncResult.failed(str(e))
        if not any(s.rows for s in sheets):
            return SyncResult.failed(
                "The workbook does not contain any data rows to import"
            )

        wanted = set(parameters) if parameters is not None else None

        def apply_sheet(sheet, stats, warnings, progress):
            candidate_ids = bridge.call(ParameterImporter.category_scope, sheet.name)
            if candidate_ids is None:
                logger.warning("No category matches sheet '%s'", sheet.name)
                warnings.append(
                    f"Sheet '{sheet.name}' matches no category; rows matched by id only"
                )
                candidate_ids = []
            for row in sheet.rows:
                stats.add(
                    bridge.call(
                        ParameterImporter.apply_row,
                        row,
                        sheet.name,
                        candidate_ids,
                        None,
                        wanted,
                    )
                )
                progress.advance()

        logger.info("Importing %d category sheets from %s", len(sheets), file_path)
        try:
            stats, warnings = SyncManager._run_import(
                bridge, sheets, CATEGORY_IMPORT_TRANSACTION, apply_sheet, batch_rows
            )
        except HostTransactionFailure as e:
            logger.exception("Import from %s aborted", file_path)
            return SyncResult.failed(f"Failed to import parameters: {e}")

        logger.info(
            "Imported %d rows from %s: %d elements updated, %d errors",
            stats.rows_processed, file_path, stats.updated_elements, len(stats.errors),
        )
        return SyncResult.from_stats(stats, warnings, str(file_path))

    @staticmethod
    def import_schedules(
        bridge: Any,
        file_path: str | Path,
        batch_rows: int = 10,
    ) -> SyncResult:
        """Write editable cells of schedule sheets back to the elements.

        Sheets are matched to live schedules by name, and columns to the
        live schedule's field order.
        """
        try:
            sheets = ExcelReader.read_schedule_sheets(file_path)
        except WorkbookError as e:
            logger.error("Could not read %s: %s", file_path, e)
            return SyncResult.failed(str(e))
        if not sheets:
            return SyncResult.failed("The workbook does not contain any schedule sheets")

        def apply_sheet(sheet, stats, warnings, progress):
            scope = bridge.call(ParameterImporter.schedule_scope, sheet.name)
            if scope is None:
                logger.warning("Schedule '%s' not found in model", sheet.name)
                stats.errors.append(ErrorRecord.missing_sheet(sheet.name))
                progress.advance(sheet.row_count)
                return
            element_ids, field_order = scope
            for row in sheet.rows:
                stats.add(
                    bridge.call(
                        ParameterImporter.apply_row,
                        row,
                        sheet.name,
                        element_ids,
                        field_order,
                    )
                )
                progress.advance()

        logger.info("Importing %d schedule sheets from %s", len(sheets), file_path)
        try:
            stats, warnings = SyncManager._run_import(
                bridge, sheets, SCHEDULE_IMPORT_TRANSACTION, apply_sheet, batch_rows
            )
        except HostTransactionFailure as e:
            logger.exception("Schedule import from %s aborted", file_path)
            return SyncResult.failed(f"Failed to import schedules: {e}")

        logger.info(
            "Imported %d schedule rows from %s: %d elements updated, %d errors",
            stats.rows_processed, file_path, stats.updated_elements, len(stats.errors),
        )
        return SyncResult.from_stats(stats, warnings, str(file_path))

    @staticmethod
    def save_error_report(file_path: str | Path, errors: Sequence[ErrorRecord]) -> SyncResult:
        """Write the error list to a two-column workbook."""
        try:
            count = ExcelWriter.write_error_report(file_path, errors)
        except WorkbookError as e:
            return SyncResult.failed(str(e))
        return SyncResult(success=True, records_processed=count, file_path=str(file_path))
