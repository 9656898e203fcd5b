"""Parameter resolution by name.

A parameter name is resolved against an element in three tiers, first
hit wins:

1. exact definition name on the instance
2. exact definition name on the instance's type
3. well-known identifier from the static name table, on the instance
   and then on the type

No hit is a valid outcome (the parameter is absent for that element),
not an error.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Final

from paramlink.excel.host import HostDocument

# Category-agnostic names
_BASE_BUILTINS: Final[dict[str, str]] = {
    "Comments": "ALL_MODEL_INSTANCE_COMMENTS",
    "Family": "ELEM_FAMILY_PARAM",
    "Family and Type": "ELEM_FAMILY_AND_TYPE_PARAM",
    "Type": "ELEM_TYPE_PARAM",
    "Type Name": "SYMBOL_NAME_PARAM",
    "Type Comments": "ALL_MODEL_TYPE_COMMENTS",
    "Mark": "ALL_MODEL_MARK",
    "Type Mark": "ALL_MODEL_TYPE_MARK",
    "Description": "ALL_MODEL_DESCRIPTION",
    "Manufacturer": "ALL_MODEL_MANUFACTURER",
    "Model": "ALL_MODEL_MODEL",
    "URL": "ALL_MODEL_URL",
    "Cost": "ALL_MODEL_COST",
    "Assembly Code": "UNIFORMAT_CODE",
    "Assembly Description": "UNIFORMAT_DESCRIPTION",
    "Keynote": "KEYNOTE_PARAM",
}

# Computed geometry, present for every category
_COMPUTED_BUILTINS: Final[dict[str, str]] = {
    "Area": "HOST_AREA_COMPUTED",
    "Volume": "HOST_VOLUME_COMPUTED",
    "Perimeter": "HOST_PERIMETER_COMPUTED",
    "Level": "LEVEL_PARAM",
}

# Category overlays, matched by keyword in the category name.
# Only the first matching overlay applies.
_CATEGORY_OVERLAYS: Final[tuple[tuple[tuple[str, ...], dict[str, str]], ...]] = (
    (
        ("Floor",),
        {
            "Default Thickness": "FLOOR_ATTR_DEFAULT_THICKNESS_PARAM",
            "Thickness": "FLOOR_ATTR_THICKNESS_PARAM",
            "Function": "FUNCTION_PARAM",
            "Structural": "FLOOR_PARAM_IS_STRUCTURAL",
        },
    ),
    (
        ("Wall",),
        {
            "Width": "WALL_ATTR_WIDTH_PARAM",
            "Function": "FUNCTION_PARAM",
            "Height": "WALL_USER_HEIGHT_PARAM",
            "Base Offset": "WALL_BASE_OFFSET",
            "Top Offset": "WALL_TOP_OFFSET",
        },
    ),
    (
        ("Door", "Window"),
        {
            "Head Height": "INSTANCE_HEAD_HEIGHT_PARAM",
            "Sill Height": "INSTANCE_SILL_HEIGHT_PARAM",
        },
    ),
)

# Integer identifiers that hold a yes/no flag
BOOLEAN_BUILTINS: Final[frozenset[str]] = frozenset(
    {"FLOOR_PARAM_IS_STRUCTURAL", "WALL_STRUCTURAL_SIGNIFICANT"}
)

# Substrings of integer parameter names that hold a yes/no flag
BOOLEAN_NAME_HINTS: Final[tuple[str, ...]] = (
    "yes",
    "no",
    "structural",
    "bearing",
    "enabled",
    "disabled",
)


class BuiltInParameterTable:
    """Immutable name -> well-known identifier lookup."""

    def __init__(
        self,
        base: Mapping[str, str],
        overlays: tuple[tuple[tuple[str, ...], Mapping[str, str]], ...],
    ) -> None:
        self._base = MappingProxyType(dict(base))
        self._overlays = tuple(
            (tuple(keywords), MappingProxyType(dict(table)))
            for keywords, table in overlays
        )

    def _overlay(self, category_name: str | None) -> Mapping[str, str]:
        if category_name:
            for keywords, table in self._overlays:
                if any(k in category_name for k in keywords):
                    return table
        return MappingProxyType({})

    def lookup(self, name: str, category_name: str | None = None) -> str | None:
        """Return the identifier for a name, overlay first."""
        overlay = self._overlay(category_name)
        if name in overlay:
            return overlay[name]
        return self._base.get(name)

    def names_for(self, category_name: str | None = None) -> dict[str, str]:
        """All names that resolve through the table for a category."""
        names = dict(self._base)
        names.update(self._overlay(category_name))
        return names


BUILTIN_PARAMETERS: Final[BuiltInParameterTable] = BuiltInParameterTable(
    {**_BASE_BUILTINS, **_COMPUTED_BUILTINS},
    _CATEGORY_OVERLAYS,
)


class Tier(str, enum.Enum):
    INSTANCE = "Instance"
    TYPE = "Type"

    @property
    def label(self) -> str:
        return f"{self.value} Parameter"


class SlotKind(str, enum.Enum):
    TEXT = "text"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    REAL = "real"
    ELEMENT_ID = "element_id"


_STORAGE_LABELS: Final[dict[str, str]] = {
    "string": "String",
    "integer": "Integer",
    "double": "Double",
    "element_id": "ElementId",
}


def is_boolean_like(name: str, builtin: str | None = None) -> bool:
    """Heuristic for integer parameters that hold yes/no values."""
    if builtin and builtin in BOOLEAN_BUILTINS:
        return True
    lowered = name.lower()
    return any(hint in lowered for hint in BOOLEAN_NAME_HINTS)


def slot_kind(name: str, parameter: Any, builtin: str | None = None) -> SlotKind:
    """Tag a parameter with the codec variant that handles it."""
    storage = parameter.storage
    if storage == "double":
        return SlotKind.REAL
    if storage == "element_id":
        return SlotKind.ELEMENT_ID
    if storage == "integer":
        builtin = builtin or parameter.builtin
        if is_boolean_like(name, builtin) or is_boolean_like(parameter.name):
            return SlotKind.BOOLEAN
        return SlotKind.INTEGER
    return SlotKind.TEXT


@dataclass(frozen=True)
class ResolvedParameter:
    """A parameter found for an element, with where it was found."""

    name: str
    parameter: Any
    owner: Any
    tier: Tier
    kind: SlotKind
    builtin: str | None = None

    @property
    def is_read_only(self) -> bool:
        return bool(self.parameter.is_read_only)

    @property
    def storage_label(self) -> str:
        storage = self.parameter.storage
        return _STORAGE_LABELS.get(getattr(storage, "value", storage), "Unknown")


def _category_name(element: Any) -> str | None:
    category = getattr(element, "category", None)
    return category.name if category is not None else None


class ParameterResolver:
    """Resolves parameter names against elements of a host document."""

    def __init__(
        self,
        document: HostDocument,
        table: BuiltInParameterTable = BUILTIN_PARAMETERS,
    ) -> None:
        self._document = document
        self._table = table

    @property
    def table(self) -> BuiltInParameterTable:
        return self._table

    def resolve(self, element: Any, name: str) -> ResolvedParameter | None:
        """Resolve a name on an element, or None if absent."""
        param = element.lookup_parameter(name)
        if param is not None:
            return self._tag(name, param, element, Tier.INSTANCE)

        type_elem = self._document.get_type(element)
        if type_elem is not None:
            param = type_elem.lookup_parameter(name)
            if param is not None:
                return self._tag(name, param, type_elem, Tier.TYPE)

        builtin = self._table.lookup(name, _category_name(element))
        if builtin is None:
            return None

        param = element.get_parameter(builtin)
        if param is not None:
            return self._tag(name, param, element, Tier.INSTANCE, builtin)
        if type_elem is not None:
            param = type_elem.get_parameter(builtin)
            if param is not None:
                return self._tag(name, param, type_elem, Tier.TYPE, builtin)
        return None

    @staticmethod
    def _tag(
        name: str,
        parameter: Any,
        owner: Any,
        tier: Tier,
        builtin: str | None = None,
    ) -> ResolvedParameter:
        return ResolvedParameter(
            name=name,
            parameter=parameter,
            owner=owner,
            tier=tier,
            kind=slot_kind(name, parameter, builtin),
            builtin=builtin,
        )
