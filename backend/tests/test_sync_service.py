"""Tests for the async service layer: worker thread + host bridge + sync log."""

from __future__ import annotations

from pathlib import Path

import openpyxl
import pytest
import pytest_asyncio
from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from conftest import build_model
from paramlink.models import Element, SyncLog
from paramlink.models.base import Base
from paramlink.models.sync_log import SyncDirection, SyncMode, SyncStatus
from paramlink.services import sync_service


@pytest_asyncio.fixture
async def db_and_model(tmp_path: Path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'document.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as session:
        model = await session.run_sync(build_model)
        yield session, model
    await engine.dispose()


async def mark_of(db, element_id: int) -> str | None:
    def read(session):
        return session.get(Element, element_id).lookup_parameter("Mark").as_string()

    return await db.run_sync(read)


async def sync_logs(db) -> list[SyncLog]:
    result = await db.execute(select(SyncLog).order_by(SyncLog.id))
    return list(result.scalars().all())


class TestExportImport:
    @pytest.mark.asyncio
    async def test_round_trip(self, db_and_model, tmp_path: Path) -> None:
        db, model = db_and_model
        path = tmp_path / "walls.xlsx"
        progress: list[int] = []

        exported = await sync_service.export_categories(
            db, path, ["Walls"], ["Mark", "Height"], progress=progress.append
        )
        assert exported.success
        assert exported.records_processed == 3
        assert progress[-1] == 100

        wb = openpyxl.load_workbook(path)
        wb["Walls"]["B2"].value = "W-10"
        wb.save(path)

        imported = await sync_service.import_categories(db, path, "walls.xlsx")
        assert imported.success
        assert imported.updated_elements == 1
        assert await mark_of(db, model.wall_1.id) == "W-10"

        logs = await sync_logs(db)
        assert [(log.direction, log.mode, log.status) for log in logs] == [
            (SyncDirection.EXPORT, SyncMode.CATEGORY, SyncStatus.SUCCESS),
            (SyncDirection.IMPORT, SyncMode.CATEGORY, SyncStatus.SUCCESS),
        ]
        assert logs[0].file_hash is not None
        assert logs[1].file_path == "walls.xlsx"

    @pytest.mark.asyncio
    async def test_partial_import_is_logged(self, db_and_model, tmp_path: Path) -> None:
        db, model = db_and_model
        path = tmp_path / "walls.xlsx"
        await sync_service.export_categories(db, path, ["Walls"], ["Mark"])
        wb = openpyxl.load_workbook(path)
        wb["Walls"].append(["424242", "ghost"])
        wb.save(path)

        result = await sync_service.import_categories(db, path, "walls.xlsx")
        assert len(result.errors) == 1

        log = (await sync_logs(db))[-1]
        assert log.status == SyncStatus.PARTIAL
        assert log.error_count == 1
        assert "Element '424242' not found in model" in log.error_message

    @pytest.mark.asyncio
    async def test_failed_export_is_logged(self, db_and_model, tmp_path: Path) -> None:
        db, _ = db_and_model
        result = await sync_service.export_categories(db, tmp_path / "x.xlsx", ["Doors"], ["Mark"])
        assert not result.success

        log = (await sync_logs(db))[-1]
        assert log.status == SyncStatus.FAILED
        assert log.error_message == "No elements found for the selected categories"
        assert log.file_hash is None

    @pytest.mark.asyncio
    async def test_schedules(self, db_and_model, tmp_path: Path) -> None:
        db, model = db_and_model
        path = tmp_path / "schedules.xlsx"
        exported = await sync_service.export_schedules(db, path, ["Wall Schedule"])
        assert exported.success

        wb = openpyxl.load_workbook(path)
        wb["Wall Schedule"]["B4"].value = "via schedule"
        wb.save(path)

        imported = await sync_service.import_schedules(db, path, "schedules.xlsx")
        assert imported.success

        def comments(session):
            wall = session.get(Element, model.wall_2.id)
            return wall.lookup_parameter("Comments").as_string()

        assert await db.run_sync(comments) == "via schedule"


class TestSyncLock:
    @pytest.mark.asyncio
    async def test_busy(self, db_and_model, tmp_path: Path) -> None:
        db, _ = db_and_model
        async with sync_service._sync_lock:
            with pytest.raises(sync_service.SyncBusyError):
                await sync_service.export_categories(db, tmp_path / "x.xlsx", ["Walls"], ["Mark"])
