"""Documents router - what the host document offers for export."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from paramlink.database import get_db
from paramlink.schemas.common import ApiResponse
from paramlink.schemas.document import (
    CategoryResponse,
    ParameterInfo,
    ScheduleResponse,
    ViewResponse,
)
from paramlink.services import catalog_service

router = APIRouter(prefix="/documents", tags=["documents"])


def _scope(entire_model: bool, view_id: int | None) -> int | None:
    return None if entire_model else view_id


@router.get("/categories")
async def list_categories(
    entire_model: bool = Query(default=True),
    view_id: int | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[list[CategoryResponse]]:
    """Exportable categories that have elements in the chosen scope."""
    if not entire_model and view_id is None:
        return ApiResponse.fail("view_id is required when entire_model is false")
    rows = await db.run_sync(
        catalog_service.categories_in_scope, _scope(entire_model, view_id)
    )
    return ApiResponse.ok([CategoryResponse(**r) for r in rows])


@router.get("/parameters")
async def list_parameters(
    categories: list[str] = Query(...),
    entire_model: bool = Query(default=True),
    view_id: int | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[list[ParameterInfo]]:
    """Parameters available on the selected categories, sorted by name."""
    if not entire_model and view_id is None:
        return ApiResponse.fail("view_id is required when entire_model is false")
    params = await db.run_sync(
        catalog_service.available_parameters,
        categories,
        _scope(entire_model, view_id),
    )
    return ApiResponse.ok([ParameterInfo.model_validate(p) for p in params])


@router.get("/schedules")
async def list_schedules(
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[list[ScheduleResponse]]:
    rows = await db.run_sync(catalog_service.list_schedules)
    return ApiResponse.ok([ScheduleResponse(**r) for r in rows])


@router.get("/views")
async def list_views(
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[list[ViewResponse]]:
    rows = await db.run_sync(catalog_service.list_views)
    return ApiResponse.ok([ViewResponse(**r) for r in rows])
