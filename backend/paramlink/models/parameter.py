import enum

from sqlalchemy import Boolean, Enum, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from paramlink.models.base import Base
from paramlink.utils.units import UnitConversionError, convert, format_number


class StorageType(str, enum.Enum):
    STRING = "string"
    INTEGER = "integer"
    DOUBLE = "double"
    ELEMENT_ID = "element_id"


def _checked_int(value: str | int | float | None) -> int:
    number = int(value)
    if not -(2**63) <= number < 2**63:
        raise ValueError(f"{number} does not fit a 64-bit integer column")
    return number


class Parameter(Base):
    """A named, typed value slot on an element."""

    __tablename__ = "parameters"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    element_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("elements.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    builtin: Mapped[str | None] = mapped_column(String(100), nullable=True)
    storage: Mapped[StorageType] = mapped_column(
        Enum(StorageType),
        nullable=False,
        default=StorageType.STRING,
    )
    is_read_only: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    unit: Mapped[str | None] = mapped_column(String(20), nullable=True)
    display_unit: Mapped[str | None] = mapped_column(String(20), nullable=True)
    text_value: Mapped[str | None] = mapped_column(Text, nullable=True)
    int_value: Mapped[int | None] = mapped_column(Integer, nullable=True)
    real_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    link_value: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Relationships
    element = relationship("Element", back_populates="parameters")

    def as_string(self) -> str | None:
        return self.text_value

    def as_integer(self) -> int:
        return self.int_value or 0

    def as_double(self) -> float:
        return self.real_value or 0.0

    def as_element_id(self) -> int | None:
        return self.link_value

    def as_value_string(self) -> str:
        """Host-formatted text, as shown in schedules (with unit symbol)."""
        if self.storage == StorageType.DOUBLE:
            value = self.as_double()
            unit = self.display_unit or self.unit
            if self.unit and self.display_unit:
                try:
                    value = convert(value, self.unit, self.display_unit)
                except UnitConversionError:
                    unit = self.unit
            text = format_number(value, 2)
            return f"{text} {unit}" if unit else text
        if self.storage == StorageType.INTEGER:
            return str(self.as_integer())
        if self.storage == StorageType.ELEMENT_ID:
            return "" if self.link_value is None else str(self.link_value)
        return self.text_value or ""

    def set(self, value: str | int | float | None) -> None:
        """Store a value in the slot matching the storage type."""
        if self.is_read_only:
            raise ValueError(f"Parameter '{self.name}' is read-only")
        if self.storage == StorageType.STRING:
            self.text_value = value if value is None else str(value)
        elif self.storage == StorageType.INTEGER:
            self.int_value = _checked_int(value)
        elif self.storage == StorageType.DOUBLE:
            self.real_value = float(value)
        else:
            self.link_value = _checked_int(value)
