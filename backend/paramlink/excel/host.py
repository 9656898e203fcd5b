"""Interface of the host document as seen by the synchronization core.

The core never owns elements; it reads and writes them through these
calls, always from the coordination context.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True)
class TableData:
    """A schedule as rendered by the host, cell text already formatted."""

    header: list[str]
    body: list[list[str]]
    summary: list[list[str]] = field(default_factory=list)


class HostDocument(Protocol):
    def get_element(self, element_id: int) -> Any | None: ...

    def get_type(self, element: Any) -> Any | None: ...

    def category_by_name(self, name: str) -> Any | None: ...

    def find_category(self, sheet_name: str) -> Any | None: ...

    def elements_in_category(
        self, category: Any, view_id: int | None = None
    ) -> list[Any]: ...

    def lookup_element_id(self, name: str) -> int | None: ...

    def schedules(self) -> list[Any]: ...

    def find_schedule(self, sheet_name: str) -> Any | None: ...

    def schedule_elements(self, schedule: Any) -> list[Any]: ...

    def schedule_field_names(self, schedule: Any) -> list[str]: ...

    def render_schedule(self, schedule: Any) -> TableData: ...

    def start_transaction(self, name: str) -> None: ...

    def commit_transaction(self) -> None: ...

    def rollback_transaction(self) -> None: ...
