from pydantic import BaseModel


class CategoryResponse(BaseModel):
    id: int
    name: str
    element_count: int


class ParameterInfo(BaseModel):
    name: str
    is_read_only: bool
    is_type: bool
    storage: str

    model_config = {"from_attributes": True}


class ScheduleResponse(BaseModel):
    id: int
    name: str
    category: str | None
    fields: list[str]
    show_grand_totals: bool


class ViewResponse(BaseModel):
    id: int
    name: str
