"""Tests for the export catalog: categories, parameters, schedules, views."""

from __future__ import annotations

from paramlink.models import Category, CategoryKind
from paramlink.services import catalog_service
from paramlink.services.catalog_service import AvailableParameter, is_exportable_category


class TestExportableCategories:
    def test_filtering(self) -> None:
        assert is_exportable_category(Category(name="Walls", kind=CategoryKind.MODEL))
        assert is_exportable_category(Category(name="Rooms", kind=CategoryKind.ANNOTATION))
        assert not is_exportable_category(Category(name="Wall Tags", kind=CategoryKind.ANNOTATION))
        assert not is_exportable_category(Category(name="Cameras", kind=CategoryKind.MODEL))
        assert not is_exportable_category(Category(name="Grid Lines", kind=CategoryKind.MODEL))

    def test_categories_in_scope(self, session, model) -> None:
        rows = catalog_service.categories_in_scope(session)
        assert [(r["name"], r["element_count"]) for r in rows] == [
            ("Floors", 1),
            ("Levels", 2),
            ("Rooms", 1),
            ("Walls", 3),
        ]

    def test_categories_in_view(self, session, model) -> None:
        rows = catalog_service.categories_in_scope(session, model.plan.id)
        assert rows == [{"id": model.walls.id, "name": "Walls", "element_count": 2}]


class TestAvailableParameters:
    def test_walls(self, session, model) -> None:
        params = catalog_service.available_parameters(session, ["Walls"])
        by_name = {p.name: p for p in params}

        assert [p.name for p in params] == [
            "Area",
            "Base Constraint",
            "Comments",
            "Family",
            "Family and Type",
            "Height",
            "Is Structural",
            "Mark",
            "Type",
            "Type Mark",
            "Width",
        ]
        # Instance wins over the type parameter of the same name
        assert by_name["Height"] == AvailableParameter("Height", False, False, "double")
        assert by_name["Width"] == AvailableParameter("Width", True, True, "double")
        assert by_name["Family"].is_read_only

    def test_identifier_only_names(self, session, model) -> None:
        params = catalog_service.available_parameters(session, ["Floors"])
        structural = next(p for p in params if p.name == "Structural")
        assert structural.is_type
        assert structural.storage == "integer"

    def test_unknown_category_is_ignored(self, session, model) -> None:
        assert catalog_service.available_parameters(session, ["Nope"]) == []


class TestListings:
    def test_schedules_exclude_templates(self, session, model) -> None:
        schedules = catalog_service.list_schedules(session)
        assert [s["name"] for s in schedules] == ["Door Schedule", "Wall Schedule"]
        wall = schedules[1]
        assert wall["category"] == "Walls"
        assert wall["fields"] == ["Mark", "Comments", "Height", "Area"]
        assert wall["show_grand_totals"] is True

    def test_views(self, session, model) -> None:
        assert catalog_service.list_views(session) == [
            {"id": model.plan.id, "name": "Level 1 - Floor Plan"}
        ]
