from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from paramlink.models.base import Base
from paramlink.models.view import view_elements


class Element(Base):
    """An addressable object in the document: an instance or a type."""

    __tablename__ = "elements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    category_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
    )
    type_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("elements.id", ondelete="SET NULL"),
        nullable=True,
    )
    is_type: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Relationships
    category = relationship("Category", back_populates="elements", lazy="selectin")
    type = relationship("Element", remote_side=[id], lazy="selectin", join_depth=1)
    parameters = relationship(
        "Parameter",
        back_populates="element",
        lazy="selectin",
        order_by="Parameter.id",
        cascade="all, delete-orphan",
    )
    views = relationship(
        "View", secondary=view_elements, back_populates="elements", lazy="select"
    )

    def lookup_parameter(self, name: str):
        """Return the parameter whose definition name matches exactly."""
        for param in self.parameters:
            if param.name == name:
                return param
        return None

    def get_parameter(self, builtin: str):
        """Return the parameter exposed under a well-known identifier."""
        for param in self.parameters:
            if param.builtin == builtin:
                return param
        return None

    def get_type(self) -> "Element | None":
        return self.type
