"""Projects host elements x parameter names into category grid snapshots.

Runs in the coordination context: every call here touches the host.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from paramlink.excel.codec import ValueCodec
from paramlink.excel.config import IDENTITY_PARAMETERS
from paramlink.excel.grid import GridRow, GridSnapshot, HeaderCell
from paramlink.excel.host import HostDocument
from paramlink.excel.palette import CellState
from paramlink.excel.resolver import ParameterResolver, ResolvedParameter, Tier

logger = logging.getLogger(__name__)


def cell_state(name: str, resolved: ResolvedParameter | None) -> CellState:
    """Colour of one exported cell, first matching rule wins."""
    if resolved is None:
        return CellState.UNAVAILABLE
    if name in IDENTITY_PARAMETERS:
        return CellState.READ_ONLY
    if resolved.is_read_only:
        return CellState.READ_ONLY
    if resolved.tier == Tier.TYPE:
        return CellState.INHERITED_FROM_TYPE
    return CellState.EDITABLE


class CategoryExporter:
    def __init__(
        self,
        document: HostDocument,
        resolver: ParameterResolver | None = None,
        codec: ValueCodec | None = None,
    ) -> None:
        self._document = document
        self._resolver = resolver or ParameterResolver(document)
        self._codec = codec or ValueCodec(document)

    def header_cells(
        self, representative: Any, parameter_names: Sequence[str]
    ) -> tuple[HeaderCell, ...]:
        headers = []
        for name in parameter_names:
            resolved = self._resolver.resolve(representative, name)
            if resolved is None:
                headers.append(HeaderCell(name))
            else:
                headers.append(
                    HeaderCell(name, resolved.tier.label, resolved.storage_label)
                )
        return tuple(headers)

    def build_row(self, element: Any, parameter_names: Sequence[str]) -> GridRow:
        values: list[str] = []
        states: list[CellState] = []
        for name in parameter_names:
            resolved = self._resolver.resolve(element, name)
            states.append(cell_state(name, resolved))
            values.append("" if resolved is None else self._codec.decode(resolved))
        return GridRow(key=str(element.id), values=tuple(values), states=tuple(states))

    def build_grid(
        self,
        category_name: str,
        parameter_names: Sequence[str],
        view_id: int | None = None,
    ) -> GridSnapshot | None:
        """Build the sheet for one category, or None if nothing to export."""
        category = self._document.category_by_name(category_name)
        if category is None:
            logger.warning("Category '%s' not found, skipped", category_name)
            return None

        elements = self._document.elements_in_category(category, view_id)
        if not elements:
            logger.info("Category '%s' has no elements in scope", category_name)
            return None

        headers = self.header_cells(elements[0], parameter_names)
        rows = tuple(self.build_row(e, parameter_names) for e in elements)
        return GridSnapshot(source_name=category_name, headers=headers, rows=rows)

    def build_grids(
        self,
        category_names: Sequence[str],
        parameter_names: Sequence[str],
        view_id: int | None = None,
    ) -> tuple[list[GridSnapshot], list[str]]:
        """Build one grid per category in input order.

        Returns:
            (grids, warnings) where warnings name the skipped categories.
        """
        grids: list[GridSnapshot] = []
        warnings: list[str] = []
        for name in category_names:
            grid = self.build_grid(name, parameter_names, view_id)
            if grid is None:
                warnings.append(f"Category '{name}' skipped: no elements to export")
            else:
                grids.append(grid)
        return grids, warnings
