"""Demo document seed script.

Populates an empty database with a small model to try the export/import
round trip against:
- Walls, Floors, Doors and Rooms categories, plus annotation categories
- Wall/floor/door types carrying type parameters
- A "Level 1" plan view and a wall schedule

Usage:
    python scripts/seed_demo.py
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

# Add backend to path so we can import paramlink modules
SCRIPT_DIR = Path(__file__).resolve().parent
PROJECT_DIR = SCRIPT_DIR.parent
BACKEND_DIR = PROJECT_DIR / "backend"
sys.path.insert(0, str(BACKEND_DIR))

from sqlalchemy import select
from sqlalchemy.orm import Session

from paramlink.config import settings
from paramlink.database import async_session_factory, init_db
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


def _text(name: str, value: str | None, builtin: str | None = None, read_only: bool = False) -> Parameter:
    return Parameter(
        name=name, builtin=builtin, storage=StorageType.STRING,
        is_read_only=read_only, text_value=value,
    )


def _length(name: str, feet: float, builtin: str | None = None, read_only: bool = False) -> Parameter:
    return Parameter(
        name=name, builtin=builtin, storage=StorageType.DOUBLE, is_read_only=read_only,
        unit="ft", display_unit="mm", real_value=feet,
    )


def _flag(name: str, value: int, builtin: str | None = None) -> Parameter:
    return Parameter(name=name, builtin=builtin, storage=StorageType.INTEGER, int_value=value)


def _identity(family: str, type_name: str) -> list[Parameter]:
    return [
        _text("Family", family, "ELEM_FAMILY_PARAM", read_only=True),
        _text("Type", type_name, "ELEM_TYPE_PARAM", read_only=True),
        _text("Family and Type", f"{family}: {type_name}", "ELEM_FAMILY_AND_TYPE_PARAM", read_only=True),
    ]


def seed(session: Session) -> int:
    """Create the demo model. Returns the number of elements created."""
    walls = Category(name="Walls", kind=CategoryKind.MODEL)
    floors = Category(name="Floors", kind=CategoryKind.MODEL)
    doors = Category(name="Doors", kind=CategoryKind.MODEL)
    rooms = Category(name="Rooms", kind=CategoryKind.MODEL)
    levels = Category(name="Levels", kind=CategoryKind.MODEL)
    tags = Category(name="Wall Tags", kind=CategoryKind.ANNOTATION)
    session.add_all([walls, floors, doors, rooms, levels, tags])

    level_1 = Element(name="Level 1", category=levels)
    level_2 = Element(name="Level 2", category=levels)

    wall_type = Element(
        name="Generic - 200mm", category=walls, is_type=True,
        parameters=[
            _length("Width", 0.656168, "WALL_ATTR_WIDTH_PARAM"),
            _text("Type Mark", "W1", "ALL_MODEL_TYPE_MARK"),
            _text("Type Comments", None, "ALL_MODEL_TYPE_COMMENTS"),
            _length("Height", 9.842520),
            _flag("Function", 1, "FUNCTION_PARAM"),
        ],
    )
    floor_type = Element(
        name="Concrete 150", category=floors, is_type=True,
        parameters=[
            _length("Default Thickness", 0.492126, "FLOOR_ATTR_DEFAULT_THICKNESS_PARAM", read_only=True),
            _flag("Structural", 1, "FLOOR_PARAM_IS_STRUCTURAL"),
        ],
    )
    door_type = Element(
        name="Single 900x2100", category=doors, is_type=True,
        parameters=[_text("Manufacturer", "Acme", "ALL_MODEL_MANUFACTURER")],
    )
    session.add_all([level_1, level_2, wall_type, floor_type, door_type])
    session.flush()

    elements: list[Element] = []
    for i in range(1, 6):
        params = _identity("Basic Wall", wall_type.name) + [
            _text("Mark", f"W-{i:02d}", "ALL_MODEL_MARK"),
            _text("Comments", None, "ALL_MODEL_INSTANCE_COMMENTS"),
            Parameter(
                name="Base Constraint", builtin="WALL_BASE_CONSTRAINT",
                storage=StorageType.ELEMENT_ID, link_value=level_1.id,
            ),
            _length("Area", 10.0 * i, "HOST_AREA_COMPUTED", read_only=True),
        ]
        if i % 2:
            # Odd walls override the type height
            params.append(_length("Height", 3.0 * i, "WALL_USER_HEIGHT_PARAM"))
        elements.append(Element(name=f"Wall {i}", category=walls, type=wall_type, parameters=params))

    for i in range(1, 3):
        elements.append(Element(
            name=f"Floor {i}", category=floors, type=floor_type,
            parameters=_identity("Floor", floor_type.name) + [
                _text("Mark", f"F-{i:02d}", "ALL_MODEL_MARK"),
                _length("Thickness", 0.492126, "FLOOR_ATTR_THICKNESS_PARAM", read_only=True),
            ],
        ))

    for i in range(1, 4):
        elements.append(Element(
            name=f"Door {i}", category=doors, type=door_type,
            parameters=_identity("Single-Flush", door_type.name) + [
                _text("Mark", f"D-{i:02d}", "ALL_MODEL_MARK"),
                _length("Sill Height", 0.0, "INSTANCE_SILL_HEIGHT_PARAM"),
                _length("Head Height", 6.889764, "INSTANCE_HEAD_HEIGHT_PARAM"),
            ],
        ))

    elements.append(Element(
        name="Office", category=rooms,
        parameters=[
            _text("Name", "Office"),
            _text("Number", "101"),
            _length("Area", 215.278, "HOST_AREA_COMPUTED", read_only=True),
        ],
    ))
    elements.append(Element(name="Tag 1", category=tags))
    session.add_all(elements)
    session.flush()

    plan = View(name="Level 1 - Floor Plan", elements=[e for e in elements if e.name != "Wall 5"])
    session.add(plan)

    schedule = Schedule(
        name="Wall Schedule", category=walls, show_grand_totals=True,
        fields=[
            ScheduleField(position=0, parameter_name="Mark"),
            ScheduleField(position=1, parameter_name="Comments"),
            ScheduleField(position=2, parameter_name="Width"),
            ScheduleField(position=3, parameter_name="Area"),
        ],
    )
    session.add(schedule)
    session.flush()
    return len(elements)


async def main() -> None:
    """Seed the demo document unless the database already has categories."""
    print("=" * 60)
    print("ParamLink - Demo Seed")
    print("=" * 60)

    settings.DATA_DIR.mkdir(parents=True, exist_ok=True)

    print("Initializing database...")
    await init_db()

    async with async_session_factory() as session:
        result = await session.execute(select(Category).limit(1))
        if result.scalar_one_or_none() is not None:
            print("  Database already seeded, skipping")
            return
        try:
            count = await session.run_sync(seed)
            await session.commit()
        except Exception as e:
            await session.rollback()
            print(f"\nERROR: Seed failed: {e}")
            raise
    print(f"  Created {count} elements")
    print("Seed completed successfully!")


if __name__ == "__main__":
    asyncio.run(main())
