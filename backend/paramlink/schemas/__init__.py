from paramlink.schemas.common import ApiResponse
from paramlink.schemas.document import (
    CategoryResponse,
    ParameterInfo,
    ScheduleResponse,
    ViewResponse,
)
from paramlink.schemas.sync import (
    CategoryExportRequest,
    ErrorReportRequest,
    ImportErrorItem,
    ScheduleExportRequest,
    SyncLogResponse,
    SyncResultResponse,
)

__all__ = [
    "ApiResponse",
    "CategoryResponse",
    "ParameterInfo",
    "ScheduleResponse",
    "ViewResponse",
    "CategoryExportRequest",
    "ErrorReportRequest",
    "ImportErrorItem",
    "ScheduleExportRequest",
    "SyncLogResponse",
    "SyncResultResponse",
]
