"""Async entry points for export/import.

The event loop owns the database session and therefore the host document.
Workbook I/O runs in a worker thread via asyncio.to_thread; the worker
reaches the host only through a HostBridge, which runs each request on the
loop with AsyncSession.run_sync.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from paramlink.config import settings
from paramlink.excel.bridge import HostBridge
from paramlink.excel.sync import SyncManager, SyncResult
from paramlink.models.sync_log import SyncDirection, SyncLog, SyncMode, SyncStatus
from paramlink.services.document import SqlDocument

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]

# One export/import at a time
_sync_lock = asyncio.Lock()


class SyncBusyError(RuntimeError):
    """Another export/import is still running."""


def _log_progress(percent: int) -> None:
    logger.debug("Progress: %d%%", percent)


def make_bridge(db: AsyncSession, progress: ProgressCallback | None = None) -> HostBridge:
    """Bridge whose host calls run as fn(SqlDocument(session)) on this loop."""

    async def runner(fn: Callable[[Any], Any]) -> Any:
        return await db.run_sync(lambda session: fn(SqlDocument(session)))

    return HostBridge(asyncio.get_running_loop(), runner, progress or _log_progress)


async def _run(fn: Callable[..., SyncResult], *args: Any) -> SyncResult:
    if _sync_lock.locked():
        raise SyncBusyError("Another synchronization is already in progress")
    async with _sync_lock:
        return await asyncio.to_thread(fn, *args)


def _status_for(result: SyncResult) -> SyncStatus:
    if not result.success:
        return SyncStatus.FAILED
    if result.errors:
        return SyncStatus.PARTIAL
    return SyncStatus.SUCCESS


async def log_sync(
    db: AsyncSession,
    file_path: str,
    direction: SyncDirection,
    mode: SyncMode,
    result: SyncResult,
    file_hash: str | None = None,
) -> SyncLog:
    error = result.message
    if error is None and result.errors:
        error = result.summary(settings.ERROR_PREVIEW_LINES)
    log = SyncLog(
        file_path=file_path,
        direction=direction,
        mode=mode,
        status=_status_for(result),
        records_processed=result.records_processed,
        error_count=len(result.errors),
        error_message=error[:1000] if error else None,
        file_hash=file_hash,
    )
    db.add(log)
    await db.commit()
    return log


def _hash_or_none(path: Path) -> str | None:
    if not path.exists():
        return None
    return SyncManager.compute_file_hash(path)


async def export_categories(
    db: AsyncSession,
    file_path: Path,
    categories: Sequence[str],
    parameters: Sequence[str],
    view_id: int | None = None,
    progress: ProgressCallback | None = None,
) -> SyncResult:
    bridge = make_bridge(db, progress)
    result = await _run(
        SyncManager.export_categories,
        bridge,
        file_path,
        list(categories),
        list(parameters),
        view_id,
        settings.PROGRESS_BATCH_ROWS,
    )
    file_hash = _hash_or_none(file_path) if result.success else None
    await log_sync(
        db, str(file_path), SyncDirection.EXPORT, SyncMode.CATEGORY, result, file_hash
    )
    return result


async def export_schedules(
    db: AsyncSession,
    file_path: Path,
    schedules: Sequence[str],
    include_headers: bool = True,
    include_grand_totals: bool = True,
    progress: ProgressCallback | None = None,
) -> SyncResult:
    bridge = make_bridge(db, progress)
    result = await _run(
        SyncManager.export_schedules,
        bridge,
        file_path,
        list(schedules),
        include_headers,
        include_grand_totals,
        settings.PROGRESS_BATCH_ROWS,
    )
    file_hash = _hash_or_none(file_path) if result.success else None
    await log_sync(
        db, str(file_path), SyncDirection.EXPORT, SyncMode.SCHEDULE, result, file_hash
    )
    return result


async def import_categories(
    db: AsyncSession,
    file_path: Path,
    original_name: str,
    categories: Sequence[str] | None = None,
    parameters: Sequence[str] | None = None,
    progress: ProgressCallback | None = None,
) -> SyncResult:
    file_hash = _hash_or_none(file_path)
    bridge = make_bridge(db, progress)
    result = await _run(
        SyncManager.import_categories,
        bridge,
        file_path,
        list(categories) if categories is not None else None,
        list(parameters) if parameters is not None else None,
        settings.PROGRESS_BATCH_ROWS,
    )
    await log_sync(
        db, original_name, SyncDirection.IMPORT, SyncMode.CATEGORY, result, file_hash
    )
    return result


async def import_schedules(
    db: AsyncSession,
    file_path: Path,
    original_name: str,
    progress: ProgressCallback | None = None,
) -> SyncResult:
    file_hash = _hash_or_none(file_path)
    bridge = make_bridge(db, progress)
    result = await _run(
        SyncManager.import_schedules,
        bridge,
        file_path,
        settings.PROGRESS_BATCH_ROWS,
    )
    await log_sync(
        db, original_name, SyncDirection.IMPORT, SyncMode.SCHEDULE, result, file_hash
    )
    return result
