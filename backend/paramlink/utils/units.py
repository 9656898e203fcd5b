"""Unit conversion between a parameter's internal unit and its display unit.

Factors convert one unit of the symbol into the SI base of its dimension.
"""

import math
from typing import Final

_LENGTH: Final[dict[str, float]] = {
    "ft": 0.3048,
    "in": 0.0254,
    "mm": 0.001,
    "cm": 0.01,
    "m": 1.0,
}

_AREA: Final[dict[str, float]] = {
    "ft2": 0.09290304,
    "in2": 0.00064516,
    "mm2": 1e-6,
    "cm2": 1e-4,
    "m2": 1.0,
}

_VOLUME: Final[dict[str, float]] = {
    "ft3": 0.028316846592,
    "in3": 1.6387064e-5,
    "mm3": 1e-9,
    "cm3": 1e-6,
    "L": 0.001,
    "m3": 1.0,
}

_ANGLE: Final[dict[str, float]] = {
    "rad": 1.0,
    "deg": math.pi / 180,
}

DIMENSIONS: Final[dict[str, dict[str, float]]] = {
    "length": _LENGTH,
    "area": _AREA,
    "volume": _VOLUME,
    "angle": _ANGLE,
}


class UnitConversionError(ValueError):
    """Raised when two unit symbols cannot be converted into each other."""


def dimension_of(unit: str) -> str:
    """Return the dimension name for a unit symbol."""
    for name, table in DIMENSIONS.items():
        if unit in table:
            return name
    raise UnitConversionError(f"Unknown unit symbol: {unit!r}")


def convert(value: float, from_unit: str, to_unit: str) -> float:
    """Convert a value between two units of the same dimension."""
    if from_unit == to_unit:
        return value
    source = dimension_of(from_unit)
    target = dimension_of(to_unit)
    if source != target:
        raise UnitConversionError(
            f"Cannot convert {from_unit!r} ({source}) to {to_unit!r} ({target})"
        )
    table = DIMENSIONS[source]
    return value * table[from_unit] / table[to_unit]


def format_number(value: float, decimals: int = 6) -> str:
    """Format a number for display, e.g. 3000.0 -> '3000', 0.25 -> '0.25'."""
    formatted = f"{round(value, decimals):.{decimals}f}"
    if "." in formatted:
        formatted = formatted.rstrip("0").rstrip(".")
    if formatted in ("-0", ""):
        formatted = "0"
    return formatted


def strip_unit_suffix(text: str, unit: str | None) -> str:
    """Remove a trailing unit symbol, e.g. '3000 mm' -> '3000'."""
    s = text.strip()
    if unit and s.endswith(unit):
        s = s[: -len(unit)].strip()
    return s
