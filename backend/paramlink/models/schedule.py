from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from paramlink.models.base import Base


class Schedule(Base):
    """A host-generated tabular report over the elements of one category."""

    __tablename__ = "schedules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    category_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("categories.id", ondelete="CASCADE"),
        nullable=False,
    )
    is_template: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    show_grand_totals: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )

    # Relationships
    category = relationship("Category", lazy="selectin")
    fields = relationship(
        "ScheduleField",
        back_populates="schedule",
        lazy="selectin",
        order_by="ScheduleField.position",
        cascade="all, delete-orphan",
    )

    def field_names(self) -> list[str]:
        """Parameter names in column order."""
        return [f.parameter_name for f in self.fields]


class ScheduleField(Base):
    __tablename__ = "schedule_fields"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    schedule_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("schedules.id", ondelete="CASCADE"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    parameter_name: Mapped[str] = mapped_column(String(200), nullable=False)
    heading: Mapped[str | None] = mapped_column(String(200), nullable=True)

    # Relationships
    schedule = relationship("Schedule", back_populates="fields")

    @property
    def column_heading(self) -> str:
        return self.heading or self.parameter_name
