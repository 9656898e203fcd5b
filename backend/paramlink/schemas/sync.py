from datetime import datetime

from pydantic import BaseModel, Field

from paramlink.excel.errors import ErrorRecord
from paramlink.excel.sync import SyncResult


class CategoryExportRequest(BaseModel):
    categories: list[str] = Field(..., min_length=1)
    parameters: list[str] = Field(..., min_length=1)
    entire_model: bool = True
    view_id: int | None = None
    file_name: str = "ParameterExport.xlsx"


class ScheduleExportRequest(BaseModel):
    schedules: list[str] = Field(..., min_length=1)
    include_headers: bool = True
    include_grand_totals: bool = True
    file_name: str = "ScheduleExport.xlsx"


class ImportErrorItem(BaseModel):
    element_id: str
    description: str

    @classmethod
    def from_record(cls, record: ErrorRecord) -> "ImportErrorItem":
        return cls(element_id=record.key, description=record.description)

    def to_record(self) -> ErrorRecord:
        return ErrorRecord(key=self.element_id, field=None, message=self.description)


class ErrorReportRequest(BaseModel):
    errors: list[ImportErrorItem]
    file_name: str = "ImportErrors.xlsx"


class SyncResultResponse(BaseModel):
    success: bool
    message: str
    records_processed: int
    updated_elements: int = 0
    cells_written: int = 0
    cells_skipped: int = 0
    cells_unchanged: int = 0
    errors: list[ImportErrorItem] = []
    warnings: list[str] = []
    file_name: str | None = None

    @classmethod
    def from_result(
        cls, result: SyncResult, preview_lines: int, file_name: str | None = None
    ) -> "SyncResultResponse":
        return cls(
            success=result.success,
            message=result.summary(preview_lines),
            records_processed=result.records_processed,
            updated_elements=result.updated_elements,
            cells_written=result.cells_written,
            cells_skipped=result.cells_skipped,
            cells_unchanged=result.cells_unchanged,
            errors=[ImportErrorItem.from_record(r) for r in result.errors],
            warnings=result.warnings,
            file_name=file_name,
        )


class SyncLogResponse(BaseModel):
    id: int
    file_path: str
    direction: str
    mode: str
    status: str
    records_processed: int
    error_count: int
    error_message: str | None
    file_hash: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
