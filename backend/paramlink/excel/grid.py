"""Immutable, host-independent tables handed to the workbook writer."""

from __future__ import annotations

from dataclasses import dataclass, field

from paramlink.excel.config import ELEMENT_ID_HEADER, truncate_sheet_name
from paramlink.excel.palette import CellState

NOT_APPLICABLE = "N/A"


@dataclass(frozen=True)
class HeaderCell:
    """Column header of a category sheet. Tier and storage are descriptive only."""

    name: str
    tier_label: str = NOT_APPLICABLE
    storage_label: str = NOT_APPLICABLE

    @property
    def text(self) -> str:
        return f"{self.name}\n({self.tier_label})\nType: {self.storage_label}"

    @staticmethod
    def parameter_name(text: str) -> str:
        """Recover the parameter name from a (possibly multi-line) header."""
        return text.split("\n", 1)[0].strip()


@dataclass(frozen=True)
class GridRow:
    key: str
    values: tuple[str, ...]
    states: tuple[CellState, ...]


@dataclass(frozen=True)
class GridSnapshot:
    """One category sheet: key column, parameter headers, one row per element."""

    source_name: str
    headers: tuple[HeaderCell, ...]
    rows: tuple[GridRow, ...]
    key_header: str = ELEMENT_ID_HEADER

    def __post_init__(self) -> None:
        width = len(self.headers)
        for row in self.rows:
            if len(row.values) != width or len(row.states) != width:
                raise ValueError(
                    f"Row '{row.key}' has {len(row.values)} cells, expected {width}"
                )

    @property
    def sheet_name(self) -> str:
        return truncate_sheet_name(self.source_name)

    @property
    def row_count(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class ScheduleSnapshot:
    """A schedule as rendered by the host, with per-column editability."""

    name: str
    headers: tuple[str, ...]
    column_states: tuple[CellState, ...]
    body: tuple[tuple[str, ...], ...]
    summary: tuple[tuple[str, ...], ...] = field(default=())
    include_headers: bool = True

    def __post_init__(self) -> None:
        width = len(self.column_states)
        if self.headers and len(self.headers) != width:
            raise ValueError(
                f"Schedule '{self.name}' has {len(self.headers)} headings "
                f"for {width} columns"
            )
        for i, row in enumerate(self.body):
            if len(row) != width:
                raise ValueError(
                    f"Schedule '{self.name}' body row {i} has {len(row)} cells, "
                    f"expected {width}"
                )

    @property
    def sheet_name(self) -> str:
        return truncate_sheet_name(self.name)

    @property
    def row_count(self) -> int:
        return len(self.body)
