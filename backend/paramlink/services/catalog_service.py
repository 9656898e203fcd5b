"""What can be exported: categories in scope, their parameters, schedules, views.

Functions take a synchronous Session as first argument so routers can call
them through AsyncSession.run_sync.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from paramlink.excel.config import (
    HIDDEN_PARAMETERS,
    IDENTITY_PARAMETERS,
    PARAMETER_SAMPLE_SIZE,
)
from paramlink.excel.resolver import BUILTIN_PARAMETERS
from paramlink.models.category import Category, CategoryKind
from paramlink.models.view import View
from paramlink.services.document import SqlDocument

logger = logging.getLogger(__name__)

# Model categories that make no sense to export
EXCLUDED_CATEGORIES: frozenset[str] = frozenset({
    "Survey Point", "Sun Path", "Project Information", "Project Base Point",
    "Primary Contours", "Material Assets", "Legend Components", "Internal Origin",
    "Cameras", "HVAC Zones", "Pipe Segments", "Area Based Load Type",
    "Circuit Naming Scheme", "<Sketch>", "Center Line", "Center line", "Lines",
    "Detail Items", "Model Lines", "Detail Lines", "<Room Separation>",
    "<Area Boundary>", "<Space Separation>", "Curtain Panel Tags",
    "Curtain System Tags", "Detail Item Tags", "Door Tags", "Floor Tags",
    "Generic Annotations", "Keynote Tags", "Material Tags", "Multi-Category Tags",
    "Parking Tags", "Plumbing Fixture Tags", "Property Line Segment Tags",
    "Property Tags", "Revision Clouds", "Room Tags", "Space Tags",
    "Structural Annotations", "Wall Tags", "Window Tags",
})

# Always offered even when not a model category
ALWAYS_INCLUDED: frozenset[str] = frozenset({"Rooms"})


@dataclass(frozen=True)
class AvailableParameter:
    name: str
    is_read_only: bool
    is_type: bool
    storage: str


def is_exportable_category(category: Category) -> bool:
    name = category.name
    if category.kind != CategoryKind.MODEL and name not in ALWAYS_INCLUDED:
        return False
    if name in EXCLUDED_CATEGORIES:
        return False
    lowered = name.lower()
    return "line" not in lowered and "sketch" not in lowered


def categories_in_scope(session: Session, view_id: int | None = None) -> list[dict]:
    """Exportable categories with at least one element in scope, by name."""
    document = SqlDocument(session)
    result = []
    for category in document.categories():
        if not is_exportable_category(category):
            continue
        count = len(document.elements_in_category(category, view_id))
        if count:
            result.append({"id": category.id, "name": category.name, "element_count": count})
    return result


def available_parameters(
    session: Session,
    category_names: Sequence[str],
    view_id: int | None = None,
) -> list[AvailableParameter]:
    """Parameters found on a sample of each category's elements.

    Instance parameters win over type parameters of the same name, and both
    win over names that only resolve through a well-known identifier.
    """
    document = SqlDocument(session)
    found: dict[str, AvailableParameter] = {}

    def add(name: str, param, is_type: bool) -> None:
        if name not in found:
            found[name] = AvailableParameter(
                name=name,
                is_read_only=bool(param.is_read_only),
                is_type=is_type,
                storage=param.storage.value,
            )

    for category_name in category_names:
        category = document.category_by_name(category_name)
        if category is None:
            logger.warning("Unknown category '%s' ignored", category_name)
            continue
        elements = document.elements_in_category(category, view_id)
        for element in elements[:PARAMETER_SAMPLE_SIZE]:
            for param in element.parameters:
                add(param.name, param, False)
            element_type = document.get_type(element)
            if element_type is not None:
                for param in element_type.parameters:
                    add(param.name, param, True)
            for name, builtin in BUILTIN_PARAMETERS.names_for(category.name).items():
                param = element.get_parameter(builtin)
                if param is not None:
                    add(name, param, False)
                elif element_type is not None:
                    param = element_type.get_parameter(builtin)
                    if param is not None:
                        add(name, param, True)

    result = []
    for name in sorted(found):
        if name in HIDDEN_PARAMETERS:
            continue
        item = found[name]
        if name in IDENTITY_PARAMETERS and not item.is_read_only:
            item = AvailableParameter(name, True, item.is_type, item.storage)
        result.append(item)
    return result


def list_schedules(session: Session) -> list[dict]:
    return [
        {
            "id": s.id,
            "name": s.name,
            "category": s.category.name if s.category else None,
            "fields": s.field_names(),
            "show_grand_totals": s.show_grand_totals,
        }
        for s in SqlDocument(session).schedules()
    ]


def list_views(session: Session) -> list[dict]:
    views = session.execute(select(View).order_by(View.name)).scalars().all()
    return [{"id": v.id, "name": v.name} for v in views]
