"""Shared fixtures: an in-memory SQLite host document with a small model.

Model:
- Walls: three walls sharing one wall type. Wall 1 and Wall 3 carry their
  own Height; Wall 2 inherits Height from the type. Only Wall 1 and Wall 2
  are visible in the plan view.
- Floors: one floor whose type exposes the structural flag only through
  its well-known identifier.
- Levels, Rooms (annotation kind, still exportable), Model Lines and Wall
  Tags (never exportable), Doors (no elements).
- Schedules: "Wall Schedule" over walls, "Door Schedule" over the empty
  Doors category.
"""

from __future__ import annotations

from collections.abc import Iterator
from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from paramlink.models import (
    Category,
    CategoryKind,
    Element,
    Parameter,
    Schedule,
    ScheduleField,
    StorageType,
    View,
)
from paramlink.models.base import Base
from paramlink.services.document import SqlDocument


def text_param(name, value, builtin=None, read_only=False) -> Parameter:
    return Parameter(
        name=name, builtin=builtin, storage=StorageType.STRING,
        is_read_only=read_only, text_value=value,
    )


def int_param(name, value, builtin=None, read_only=False) -> Parameter:
    return Parameter(
        name=name, builtin=builtin, storage=StorageType.INTEGER,
        is_read_only=read_only, int_value=value,
    )


def length_param(name, feet, builtin=None, read_only=False, display_unit="mm") -> Parameter:
    return Parameter(
        name=name, builtin=builtin, storage=StorageType.DOUBLE,
        is_read_only=read_only, unit="ft", display_unit=display_unit, real_value=feet,
    )


def link_param(name, target_id, builtin=None, read_only=False) -> Parameter:
    return Parameter(
        name=name, builtin=builtin, storage=StorageType.ELEMENT_ID,
        is_read_only=read_only, link_value=target_id,
    )


def identity_params(family: str, type_name: str) -> list[Parameter]:
    return [
        text_param("Family", family, "ELEM_FAMILY_PARAM", read_only=True),
        text_param("Type", type_name, "ELEM_TYPE_PARAM", read_only=True),
        text_param(
            "Family and Type", f"{family}: {type_name}",
            "ELEM_FAMILY_AND_TYPE_PARAM", read_only=True,
        ),
    ]


def build_model(session: Session) -> SimpleNamespace:
    """Populate the session with the demo model and return handles to it."""
    walls = Category(name="Walls", kind=CategoryKind.MODEL)
    floors = Category(name="Floors", kind=CategoryKind.MODEL)
    doors = Category(name="Doors", kind=CategoryKind.MODEL)
    levels = Category(name="Levels", kind=CategoryKind.MODEL)
    rooms = Category(name="Rooms", kind=CategoryKind.ANNOTATION)
    model_lines = Category(name="Model Lines", kind=CategoryKind.MODEL)
    wall_tags = Category(name="Wall Tags", kind=CategoryKind.ANNOTATION)
    session.add_all([walls, floors, doors, levels, rooms, model_lines, wall_tags])

    level_1 = Element(name="Level 1", category=levels)
    level_2 = Element(name="Level 2", category=levels)
    wall_type = Element(
        name="Generic - 200mm", category=walls, is_type=True,
        parameters=[
            length_param("Height", 12.0),
            length_param("Width", 0.5, "WALL_ATTR_WIDTH_PARAM", read_only=True),
            text_param("Type Mark", "W1", "ALL_MODEL_TYPE_MARK"),
        ],
    )
    floor_type = Element(
        name="Concrete 150", category=floors, is_type=True,
        parameters=[int_param("Floor Is Structural", 1, "FLOOR_PARAM_IS_STRUCTURAL")],
    )
    session.add_all([level_1, level_2, wall_type, floor_type])
    session.flush()

    wall_1 = Element(
        name="Wall 1", category=walls, type=wall_type,
        parameters=identity_params("Basic Wall", wall_type.name) + [
            text_param("Mark", "W-01", "ALL_MODEL_MARK"),
            text_param("Comments", "north", "ALL_MODEL_INSTANCE_COMMENTS"),
            length_param("Height", 10.0, "WALL_USER_HEIGHT_PARAM"),
            int_param("Is Structural", 1),
            length_param("Area", 100.0, "HOST_AREA_COMPUTED", read_only=True, display_unit="ft"),
            link_param("Base Constraint", level_1.id, "WALL_BASE_CONSTRAINT"),
        ],
    )
    wall_2 = Element(
        name="Wall 2", category=walls, type=wall_type,
        parameters=identity_params("Basic Wall", wall_type.name) + [
            text_param("Mark", "W-02", "ALL_MODEL_MARK"),
            text_param("Comments", None, "ALL_MODEL_INSTANCE_COMMENTS"),
            int_param("Is Structural", 0),
            length_param("Area", 120.0, "HOST_AREA_COMPUTED", read_only=True, display_unit="ft"),
            link_param("Base Constraint", None, "WALL_BASE_CONSTRAINT"),
        ],
    )
    wall_3 = Element(
        name="Wall 3", category=walls, type=wall_type,
        parameters=identity_params("Basic Wall", wall_type.name) + [
            text_param("Mark", "W-03", "ALL_MODEL_MARK"),
            text_param("Comments", "", "ALL_MODEL_INSTANCE_COMMENTS"),
            length_param("Height", 8.0, "WALL_USER_HEIGHT_PARAM"),
            int_param("Is Structural", 1),
            length_param("Area", 80.0, "HOST_AREA_COMPUTED", read_only=True, display_unit="ft"),
            link_param("Base Constraint", level_2.id, "WALL_BASE_CONSTRAINT"),
        ],
    )
    floor_1 = Element(
        name="Floor 1", category=floors, type=floor_type,
        parameters=identity_params("Floor", floor_type.name) + [
            text_param("Mark", "F-01", "ALL_MODEL_MARK"),
        ],
    )
    office = Element(
        name="Office", category=rooms,
        parameters=[text_param("Number", "101")],
    )
    line_1 = Element(name="Line 1", category=model_lines)
    tag_1 = Element(name="Tag 1", category=wall_tags)
    session.add_all([wall_1, wall_2, wall_3, floor_1, office, line_1, tag_1])
    session.flush()

    plan = View(name="Level 1 - Floor Plan", elements=[wall_1, wall_2])
    wall_schedule = Schedule(
        name="Wall Schedule", category=walls, show_grand_totals=True,
        fields=[
            ScheduleField(position=0, parameter_name="Mark"),
            ScheduleField(position=1, parameter_name="Comments"),
            ScheduleField(position=2, parameter_name="Height", heading="Wall Height"),
            ScheduleField(position=3, parameter_name="Area"),
        ],
    )
    door_schedule = Schedule(
        name="Door Schedule", category=doors,
        fields=[
            ScheduleField(position=0, parameter_name="Mark"),
            ScheduleField(position=1, parameter_name="Comments"),
        ],
    )
    template = Schedule(
        name="Template Schedule", category=walls, is_template=True,
        fields=[ScheduleField(position=0, parameter_name="Mark")],
    )
    session.add_all([plan, wall_schedule, door_schedule, template])
    session.commit()

    return SimpleNamespace(
        walls=walls,
        floors=floors,
        doors=doors,
        levels=levels,
        rooms=rooms,
        level_1=level_1,
        level_2=level_2,
        wall_type=wall_type,
        floor_type=floor_type,
        wall_1=wall_1,
        wall_2=wall_2,
        wall_3=wall_3,
        floor_1=floor_1,
        office=office,
        plan=plan,
        wall_schedule=wall_schedule,
        door_schedule=door_schedule,
    )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine) -> Iterator[Session]:
    with Session(engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
def model(session: Session) -> SimpleNamespace:
    return build_model(session)


@pytest.fixture
def document(session: Session, model: SimpleNamespace) -> SqlDocument:
    return SqlDocument(session)
