"""
Category model for the product catalog.

Categories group products. Products point at a category through a plain
foreign key; the category row knows nothing about its products.
"""

from sqlalchemy import Column, Index, String, Text, func
from sqlalchemy.orm import validates

from smartorder.models.base import Base, IntegerIdMixin, ModelMixin, require_text


class Category(Base, IntegerIdMixin, ModelMixin):
    """
    Product category.

    Attributes:
        id: Integer primary key (from IntegerIdMixin)
        name: Display name, unique regardless of case
        description: Optional free text
    """

    __tablename__ = "categories"

    name = Column(
        String(100),
        nullable=False,
        doc="Category name (unique, case-insensitive)"
    )

    description = Column(
        Text,
        nullable=True,
        doc="Optional description"
    )

    __table_args__ = (
        Index("uq_categories_name_lower", func.lower(name), unique=True),
    )

    @validates("name")
    def _validate_name(self, key: str, value: str) -> str:
        return require_text(key, value)
