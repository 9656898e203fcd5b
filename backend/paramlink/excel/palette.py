"""Cell colour channel.

The background colour of every exported data cell encodes whether the
value may be written back. The four RGB values are part of the file
format: previously exported workbooks are decoded with the same table,
so they must never change.
"""

from __future__ import annotations

import enum
from typing import Any, Final

from openpyxl.styles import PatternFill


class CellState(str, enum.Enum):
    UNAVAILABLE = "unavailable"
    READ_ONLY = "read_only"
    INHERITED_FROM_TYPE = "inherited_from_type"
    EDITABLE = "editable"

    @property
    def rgb(self) -> str:
        return PALETTE[self]

    @property
    def is_writable(self) -> bool:
        return self in (CellState.EDITABLE, CellState.INHERITED_FROM_TYPE)


PALETTE: Final[dict[CellState, str]] = {
    CellState.UNAVAILABLE: "D3D3D3",
    CellState.READ_ONLY: "FF4747",
    CellState.INHERITED_FROM_TYPE: "FFE699",
    CellState.EDITABLE: "FFFFFF",
}

_BY_RGB: Final[dict[str, CellState]] = {rgb: state for state, rgb in PALETTE.items()}

# Legend rows: (state, description, notes)
LEGEND_ENTRIES: Final[tuple[tuple[CellState, str, str], ...]] = (
    (
        CellState.INHERITED_FROM_TYPE,
        "Type value",
        "Type parameters with the same ID should be filled the same",
    ),
    (CellState.READ_ONLY, "Read-only value", "Uneditable cell"),
    (
        CellState.UNAVAILABLE,
        "Parameter does not exist for element",
        "Applies to Category export only",
    ),
    (CellState.EDITABLE, "Editable value", "Written back to the model on import"),
)


def solid_fill(rgb: str) -> PatternFill:
    """Build a solid openpyxl fill from an RGB hex string."""
    return PatternFill(fill_type="solid", start_color=rgb, end_color=rgb)


def fill_for(state: CellState) -> PatternFill:
    return solid_fill(state.rgb)


def fill_rgb(cell: Any) -> str | None:
    """Return the 6-digit RGB of a cell's solid fill, or None if unfilled."""
    fill = getattr(cell, "fill", None)
    if fill is None or fill.fill_type != "solid":
        return None
    color = fill.start_color
    if color is None or color.type != "rgb" or not isinstance(color.rgb, str):
        return None
    # openpyxl stores ARGB ("FFD3D3D3")
    return color.rgb[-6:].upper()


def classify_cell(cell: Any) -> CellState:
    """Decode the colour channel of a cell.

    Unfilled cells and colours outside the palette count as editable.
    """
    rgb = fill_rgb(cell)
    if rgb is None:
        return CellState.EDITABLE
    return _BY_RGB.get(rgb, CellState.EDITABLE)
