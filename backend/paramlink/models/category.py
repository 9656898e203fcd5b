import enum

from sqlalchemy import Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from paramlink.models.base import Base


class CategoryKind(str, enum.Enum):
    MODEL = "model"
    ANNOTATION = "annotation"


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    kind: Mapped[CategoryKind] = mapped_column(
        Enum(CategoryKind),
        nullable=False,
        default=CategoryKind.MODEL,
    )

    # Relationships
    elements = relationship("Element", back_populates="category", lazy="select")
