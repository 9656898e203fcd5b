from sqlalchemy import Column, ForeignKey, Integer, String, Table
from sqlalchemy.orm import Mapped, mapped_column, relationship

from paramlink.models.base import Base

# Elements visible in a view
view_elements = Table(
    "view_elements",
    Base.metadata,
    Column("view_id", ForeignKey("views.id", ondelete="CASCADE"), primary_key=True),
    Column("element_id", ForeignKey("elements.id", ondelete="CASCADE"), primary_key=True),
)


class View(Base):
    __tablename__ = "views"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    # Relationships
    elements = relationship(
        "Element", secondary=view_elements, back_populates="views", lazy="selectin"
    )
