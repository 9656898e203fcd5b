"""Sync router - export/import between the host document and Excel files."""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from paramlink.config import settings
from paramlink.database import get_db
from paramlink.excel.sync import SyncManager
from paramlink.models.sync_log import SyncLog
from paramlink.schemas.common import ApiResponse
from paramlink.schemas.sync import (
    CategoryExportRequest,
    ErrorReportRequest,
    ScheduleExportRequest,
    SyncLogResponse,
    SyncResultResponse,
)
from paramlink.services import sync_service
from paramlink.services.sync_service import SyncBusyError

router = APIRouter(prefix="/sync", tags=["sync"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


# --- Helpers ---

def _save_upload(upload: UploadFile) -> Path:
    """Save an uploaded file to a temp file and return the path.

    The caller is responsible for cleaning up via unlink().
    """
    suffix = Path(upload.filename or "upload.xlsx").suffix or ".xlsx"
    fd, tmp_path = tempfile.mkstemp(suffix=suffix)
    try:
        with open(fd, "wb") as f:
            shutil.copyfileobj(upload.file, f)
    except Exception:
        Path(tmp_path).unlink(missing_ok=True)
        raise
    return Path(tmp_path)


def _export_path(file_name: str) -> Path:
    """Resolve a file name inside EXPORT_DIR, rejecting path components."""
    name = Path(file_name).name
    if not name or name != file_name:
        raise HTTPException(status_code=400, detail=f"Invalid file name: {file_name}")
    if not name.lower().endswith(".xlsx"):
        name = f"{name}.xlsx"
    export_dir = Path(settings.EXPORT_DIR)
    export_dir.mkdir(parents=True, exist_ok=True)
    return export_dir / name


def _response(result, file_name: str | None = None) -> ApiResponse[SyncResultResponse]:
    body = SyncResultResponse.from_result(
        result, settings.ERROR_PREVIEW_LINES, file_name if result.success else None
    )
    if not result.success:
        return ApiResponse(success=False, data=body, error=body.message)
    return ApiResponse.ok(body)


# --- Export ---

@router.post("/export/categories")
async def export_categories(
    request: CategoryExportRequest,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[SyncResultResponse]:
    """Export one sheet per category with the selected parameters."""
    if not request.entire_model and request.view_id is None:
        return ApiResponse.fail("view_id is required when entire_model is false")
    path = _export_path(request.file_name)
    try:
        result = await sync_service.export_categories(
            db,
            path,
            request.categories,
            request.parameters,
            None if request.entire_model else request.view_id,
        )
    except SyncBusyError as e:
        return ApiResponse.fail(str(e))
    return _response(result, path.name)


@router.post("/export/schedules")
async def export_schedules(
    request: ScheduleExportRequest,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[SyncResultResponse]:
    """Export one sheet per schedule, as the host renders it."""
    path = _export_path(request.file_name)
    try:
        result = await sync_service.export_schedules(
            db,
            path,
            request.schedules,
            request.include_headers,
            request.include_grand_totals,
        )
    except SyncBusyError as e:
        return ApiResponse.fail(str(e))
    return _response(result, path.name)


# --- Import ---

@router.post("/import/categories")
async def import_categories(
    file: UploadFile = File(..., description="Exported parameter workbook (.xlsx)"),
    categories: list[str] | None = Query(default=None),
    parameters: list[str] | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[SyncResultResponse]:
    """Write editable cells of an exported workbook back to the elements."""
    tmp_path = _save_upload(file)
    try:
        result = await sync_service.import_categories(
            db, tmp_path, file.filename or "upload.xlsx", categories, parameters
        )
    except SyncBusyError as e:
        return ApiResponse.fail(str(e))
    finally:
        tmp_path.unlink(missing_ok=True)
    return _response(result)


@router.post("/import/schedules")
async def import_schedules(
    file: UploadFile = File(..., description="Exported schedule workbook (.xlsx)"),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[SyncResultResponse]:
    """Write editable schedule cells back to the scheduled elements."""
    tmp_path = _save_upload(file)
    try:
        result = await sync_service.import_schedules(
            db, tmp_path, file.filename or "upload.xlsx"
        )
    except SyncBusyError as e:
        return ApiResponse.fail(str(e))
    finally:
        tmp_path.unlink(missing_ok=True)
    return _response(result)


# --- Error report ---

@router.post("/errors/report")
async def save_error_report(request: ErrorReportRequest) -> FileResponse:
    """Return the import errors as a two-column workbook."""
    path = _export_path(request.file_name)
    result = SyncManager.save_error_report(
        path, [item.to_record() for item in request.errors]
    )
    if not result.success:
        raise HTTPException(status_code=409, detail=result.message)
    return FileResponse(path=str(path), filename=path.name, media_type=XLSX_MEDIA_TYPE)


# --- Download / history ---

@router.get("/download/{file_name}")
async def download_export(file_name: str) -> FileResponse:
    path = _export_path(file_name)
    if not path.exists():
        raise HTTPException(status_code=404, detail=f"Export file not found: {path.name}")
    return FileResponse(path=str(path), filename=path.name, media_type=XLSX_MEDIA_TYPE)


@router.get("/history")
async def get_sync_history(
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[list[SyncLogResponse]]:
    result = await db.execute(
        select(SyncLog).order_by(SyncLog.created_at.desc()).limit(settings.HISTORY_LIMIT)
    )
    logs = result.scalars().all()
    return ApiResponse.ok([
        SyncLogResponse(
            id=log.id,
            file_path=log.file_path,
            direction=log.direction.value,
            mode=log.mode.value,
            status=log.status.value,
            records_processed=log.records_processed,
            error_count=log.error_count,
            error_message=log.error_message,
            file_hash=log.file_hash,
            created_at=log.created_at,
        )
        for log in logs
    ])
