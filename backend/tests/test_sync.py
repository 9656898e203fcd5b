"""End-to-end export/import through SyncManager, plus the host bridges."""

from __future__ import annotations

import asyncio
import threading
from pathlib import Path

import openpyxl
import pytest

from paramlink.excel.bridge import DirectBridge, HostBridge
from paramlink.excel.errors import ErrorKind, ErrorRecord, HostTransactionFailure
from paramlink.excel.reader import ExcelReader
from paramlink.excel.sync import SyncManager, SyncResult
from paramlink.excel.writer import lock_file_for
from paramlink.services.document import SqlDocument


class FailingCommitDocument(SqlDocument):
    def commit_transaction(self) -> None:
        raise HostTransactionFailure("disk full")


def export_walls(document, path: Path, parameters=("Mark", "Height", "Comments", "Family")):
    result = SyncManager.export_categories(
        DirectBridge(document), path, ["Walls"], list(parameters)
    )
    assert result.success
    return result


def edit_cell(path: Path, sheet: str, cell: str, value) -> None:
    wb = openpyxl.load_workbook(path)
    wb[sheet][cell].value = value
    wb.save(path)


def append_row(path: Path, sheet: str, values: list) -> None:
    wb = openpyxl.load_workbook(path)
    wb[sheet].append(values)
    wb.save(path)


class TestExportCategories:
    def test_writes_workbook_and_reports_progress(self, document, model, tmp_path) -> None:
        seen: list[int] = []
        path = tmp_path / "walls.xlsx"
        result = SyncManager.export_categories(
            DirectBridge(document, seen.append), path, ["Walls", "Floors"], ["Mark"], batch_rows=2
        )
        assert result.success
        assert result.records_processed == 4
        assert result.file_path == str(path)
        assert openpyxl.load_workbook(path).sheetnames == ["Color Legend", "Walls", "Floors"]
        assert seen == sorted(seen)
        assert seen[-1] == 100

    def test_nothing_to_export(self, document, model, tmp_path) -> None:
        path = tmp_path / "doors.xlsx"
        result = SyncManager.export_categories(DirectBridge(document), path, ["Doors"], ["Mark"])
        assert not result.success
        assert result.message == "No elements found for the selected categories"
        assert result.warnings == ["Category 'Doors' skipped: no elements to export"]
        assert not path.exists()

    def test_locked_file(self, document, model, tmp_path) -> None:
        path = tmp_path / "walls.xlsx"
        lock_file_for(path).write_text("owner")
        result = SyncManager.export_categories(DirectBridge(document), path, ["Walls"], ["Mark"])
        assert not result.success
        assert "already open" in result.message

    def test_view_scope(self, document, model, tmp_path) -> None:
        path = tmp_path / "plan.xlsx"
        result = SyncManager.export_categories(
            DirectBridge(document), path, ["Walls"], ["Mark"], view_id=model.plan.id
        )
        assert result.records_processed == 2


class TestImportCategories:
    """Export, edit the workbook, import."""

    def test_unmodified_workbook_changes_nothing(self, document, model, tmp_path) -> None:
        path = tmp_path / "walls.xlsx"
        export_walls(document, path)

        result = SyncManager.import_categories(DirectBridge(document), path)
        assert result.success
        assert result.records_processed == 3
        assert result.updated_elements == 0
        assert result.cells_written == 0
        # Family is read-only on every row
        assert result.cells_skipped == 3
        assert result.errors == []
        assert result.summary() == "Completed successfully. 3 rows processed, 0 elements updated."

    def test_edits_are_written_back(self, document, model, tmp_path) -> None:
        path = tmp_path / "walls.xlsx"
        export_walls(document, path)
        edit_cell(path, "Walls", "B2", "W-10")
        edit_cell(path, "Walls", "C3", "3000")
        edit_cell(path, "Walls", "E2", "Hacked")

        result = SyncManager.import_categories(DirectBridge(document), path)

        assert result.success
        assert result.updated_elements == 2
        assert result.cells_written == 2
        assert model.wall_1.lookup_parameter("Mark").as_string() == "W-10"
        assert model.wall_type.lookup_parameter("Height").real_value == pytest.approx(3000 / 304.8)
        assert model.wall_1.lookup_parameter("Family").as_string() == "Basic Wall"
        assert document.transaction_name is None

    def test_partial_failure(self, document, model, tmp_path) -> None:
        path = tmp_path / "walls.xlsx"
        export_walls(document, path)
        edit_cell(path, "Walls", "B4", "W-33")
        append_row(path, "Walls", ["999999", "ghost"])

        result = SyncManager.import_categories(DirectBridge(document), path)

        assert result.success
        assert result.records_processed == 4
        assert result.updated_elements == 1
        (error,) = result.errors
        assert error.kind == ErrorKind.ROW_KEY_UNRESOLVED
        assert error.key == "999999"
        assert model.wall_3.lookup_parameter("Mark").as_string() == "W-33"
        assert result.summary().startswith("Completed with 1 errors. 4 rows processed")

    def test_oversized_number_is_one_cell_error(self, document, model, tmp_path) -> None:
        path = tmp_path / "walls.xlsx"
        export_walls(document, path, parameters=("Base Constraint", "Mark"))
        edit_cell(path, "Walls", "B2", "99999999999999999999")
        edit_cell(path, "Walls", "C3", "W-02x")

        result = SyncManager.import_categories(DirectBridge(document), path)

        assert result.success
        assert result.updated_elements == 1
        (error,) = result.errors
        assert error.kind == ErrorKind.CODEC
        assert error.key == str(model.wall_1.id)
        assert error.field == "Base Constraint"
        assert model.wall_1.lookup_parameter("Base Constraint").link_value == model.level_1.id
        assert model.wall_2.lookup_parameter("Mark").as_string() == "W-02x"

    def test_leading_equals_text_survives(self, document, model, tmp_path) -> None:
        model.wall_1.lookup_parameter("Comments").set("=see note")
        path = tmp_path / "walls.xlsx"
        export_walls(document, path)

        result = SyncManager.import_categories(DirectBridge(document), path)
        assert result.updated_elements == 0
        assert model.wall_1.lookup_parameter("Comments").as_string() == "=see note"

    def test_rows_keyed_by_mark(self, document, model, tmp_path) -> None:
        path = tmp_path / "walls.xlsx"
        export_walls(document, path)
        edit_cell(path, "Walls", "A2", "W-01")
        edit_cell(path, "Walls", "D2", "keyed by mark")

        result = SyncManager.import_categories(DirectBridge(document), path)
        assert result.errors == []
        assert model.wall_1.lookup_parameter("Comments").as_string() == "keyed by mark"

    def test_parameter_selection(self, document, model, tmp_path) -> None:
        path = tmp_path / "walls.xlsx"
        export_walls(document, path)
        edit_cell(path, "Walls", "B2", "W-10")
        edit_cell(path, "Walls", "D2", "changed")

        SyncManager.import_categories(DirectBridge(document), path, parameters=["Comments"])
        assert model.wall_1.lookup_parameter("Mark").as_string() == "W-01"
        assert model.wall_1.lookup_parameter("Comments").as_string() == "changed"

    def test_commit_failure_rolls_back(self, session, model, tmp_path) -> None:
        path = tmp_path / "walls.xlsx"
        export_walls(SqlDocument(session), path)
        edit_cell(path, "Walls", "B2", "W-10")

        document = FailingCommitDocument(session)
        result = SyncManager.import_categories(DirectBridge(document), path)

        assert not result.success
        assert result.message == "Failed to import parameters: disk full"
        assert document.transaction_name is None
        session.refresh(model.wall_1)
        assert model.wall_1.lookup_parameter("Mark").as_string() == "W-01"

    def test_transaction_spans_the_whole_workbook(self, document, model, tmp_path) -> None:
        calls: list[str] = []

        class RecordingDocument(SqlDocument):
            def start_transaction(self, name):
                calls.append(f"start:{name}")
                super().start_transaction(name)

            def commit_transaction(self):
                calls.append("commit")
                super().commit_transaction()

        path = tmp_path / "two.xlsx"
        SyncManager.export_categories(DirectBridge(document), path, ["Walls", "Floors"], ["Mark"])
        SyncManager.import_categories(DirectBridge(RecordingDocument(document.session)), path)
        assert calls == ["start:Import Parameters from Excel", "commit"]

    def test_empty_workbook(self, document, model, tmp_path) -> None:
        path = tmp_path / "empty.xlsx"
        openpyxl.Workbook().save(path)
        result = SyncManager.import_categories(DirectBridge(document), path)
        assert not result.success
        assert result.message == "The workbook does not contain any data rows to import"


class TestSqlDocumentTransactions:
    def test_flush_overflow_becomes_transaction_failure(self, document, model) -> None:
        document.start_transaction("Import Parameters from Excel")
        model.wall_1.lookup_parameter("Is Structural").int_value = 2**70

        with pytest.raises(HostTransactionFailure):
            document.commit_transaction()
        assert document.transaction_name is None
        assert model.wall_1.lookup_parameter("Is Structural").int_value == 1

    def test_parameter_set_rejects_oversized_integers(self, model) -> None:
        with pytest.raises(ValueError):
            model.wall_1.lookup_parameter("Is Structural").set(2**63)
        assert model.wall_1.lookup_parameter("Is Structural").int_value == 1


class TestSchedules:
    def test_round_trip(self, document, model, tmp_path) -> None:
        path = tmp_path / "schedules.xlsx"
        exported = SyncManager.export_schedules(
            DirectBridge(document), path, ["Wall Schedule", "Door Schedule"]
        )
        assert exported.success
        assert exported.records_processed == 3
        assert ExcelReader.sheet_names(path) == ["Wall Schedule", "Door Schedule"]

        # Row 3 is Wall 1: title, headings, then the body
        edit_cell(path, "Wall Schedule", "B3", "from schedule")
        edit_cell(path, "Wall Schedule", "D3", "1 ft")

        result = SyncManager.import_schedules(DirectBridge(document), path)
        assert result.success
        assert result.errors == []
        assert result.records_processed == 3
        assert model.wall_1.lookup_parameter("Comments").as_string() == "from schedule"
        # Area is read-only in the schedule
        assert model.wall_1.lookup_parameter("Area").real_value == 100.0

    def test_missing_schedule_is_reported(self, document, model, tmp_path) -> None:
        path = tmp_path / "schedules.xlsx"
        SyncManager.export_schedules(DirectBridge(document), path, ["Wall Schedule"])
        wb = openpyxl.load_workbook(path)
        wb["Wall Schedule"].title = "Deleted Schedule"
        wb.save(path)

        result = SyncManager.import_schedules(DirectBridge(document), path)
        assert result.success
        (error,) = result.errors
        assert error.kind == ErrorKind.SHEET_NOT_FOUND
        assert error.description == "Schedule 'Deleted Schedule' not found in model"

    def test_none_found(self, document, model, tmp_path) -> None:
        result = SyncManager.export_schedules(DirectBridge(document), tmp_path / "x.xlsx", ["Nope"])
        assert not result.success
        assert result.warnings == ["Schedule 'Nope' not found in model"]


class TestSyncResultSummary:
    def test_failure_message(self) -> None:
        assert SyncResult.failed("boom").summary() == "boom"

    def test_preview_is_capped(self) -> None:
        errors = [ErrorRecord.unresolved_row(str(i)) for i in range(12)]
        result = SyncResult(success=True, records_processed=12, errors=errors)
        lines = result.summary(preview_lines=10).split("\n")
        assert lines[0] == "Completed with 12 errors. 12 rows processed, 0 elements updated."
        assert lines[1] == "0: Element '0' not found in model"
        assert len(lines) == 12
        assert lines[-1] == "... and 2 more. Save the error report for the full list."


class TestErrorReport:
    def test_save(self, tmp_path) -> None:
        path = tmp_path / "errors.xlsx"
        result = SyncManager.save_error_report(path, [ErrorRecord.unresolved_row("1")])
        assert result.success
        assert result.records_processed == 1

    def test_locked(self, tmp_path) -> None:
        path = tmp_path / "errors.xlsx"
        lock_file_for(path).write_text("owner")
        assert not SyncManager.save_error_report(path, []).success


class TestHostBridge:
    """Host calls from a worker thread run on the loop."""

    @pytest.mark.asyncio
    async def test_call_runs_on_loop_thread(self) -> None:
        loop_thread = threading.get_ident()
        seen: list[int] = []

        async def runner(fn):
            seen.append(threading.get_ident())
            return fn("document")

        bridge = HostBridge(asyncio.get_running_loop(), runner)
        result = await asyncio.to_thread(bridge.call, lambda doc, n: f"{doc}:{n}", 7)

        assert result == "document:7"
        assert seen == [loop_thread]

    @pytest.mark.asyncio
    async def test_exceptions_cross_back(self) -> None:
        async def runner(fn):
            return fn(None)

        def fail(document):
            raise HostTransactionFailure("nope")

        bridge = HostBridge(asyncio.get_running_loop(), runner)
        with pytest.raises(HostTransactionFailure):
            await asyncio.to_thread(bridge.call, fail)

    @pytest.mark.asyncio
    async def test_refuses_calls_from_the_loop(self) -> None:
        async def runner(fn):
            return fn(None)

        bridge = HostBridge(asyncio.get_running_loop(), runner)
        with pytest.raises(RuntimeError):
            bridge.call(lambda doc: None)

    @pytest.mark.asyncio
    async def test_progress_posted_to_loop(self) -> None:
        loop_thread = threading.get_ident()
        seen: list[tuple[int, int]] = []

        async def runner(fn):
            return fn(None)

        bridge = HostBridge(
            asyncio.get_running_loop(),
            runner,
            lambda percent: seen.append((percent, threading.get_ident())),
        )
        await asyncio.to_thread(bridge.progress, 50)
        await asyncio.sleep(0)
        assert seen == [(50, loop_thread)]
