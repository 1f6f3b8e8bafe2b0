"""
Product model for the product catalog.

A product belongs to exactly one category, referenced by category_id only.
There is no relationship attribute. Callers that need the
category row ask ProductStore.find_by_id_with_category for an explicit join.
"""

from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    true,
)
from sqlalchemy.orm import validates

from smartorder.core.exceptions import InvalidEntityError
from smartorder.models.base import (
    Base,
    IntegerIdMixin,
    ModelMixin,
    Money,
    require_text,
    to_decimal,
)


class Product(Base, IntegerIdMixin, ModelMixin):
    """
    Catalog product.

    Attributes:
        id: Integer primary key (from IntegerIdMixin)
        name: Product name
        description: Optional free text
        price: Non-negative Decimal with two fractional digits
        stock_quantity: Units in stock, None when untracked
        active: Whether the product is offered for sale
        category_id: Foreign key to Category (required)
    """

    __tablename__ = "products"

    name = Column(
        String(150),
        nullable=False,
        doc="Product name"
    )

    description = Column(
        Text,
        nullable=True,
        doc="Optional description"
    )

    price = Column(
        Money,
        nullable=False,
        doc="Unit price, exact to the cent"
    )

    stock_quantity = Column(
        Integer,
        nullable=True,
        doc="Units in stock (None when untracked)"
    )

    active = Column(
        Boolean,
        nullable=False,
        default=True,
        server_default=true(),
        doc="Whether the product is offered for sale"
    )

    category_id = Column(
        Integer,
        ForeignKey("categories.id"),
        nullable=False,
        doc="Foreign key to Category"
    )

    __table_args__ = (
        Index("idx_products_category", "category_id"),
        Index("idx_products_price", "price"),
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
        CheckConstraint(
            "stock_quantity IS NULL OR stock_quantity >= 0",
            name="ck_products_stock_non_negative"
        ),
    )

    @validates("name")
    def _validate_name(self, key: str, value: str) -> str:
        return require_text(key, value)

    @validates("price")
    def _validate_price(self, key: str, value: Any) -> Decimal:
        if value is None:
            raise InvalidEntityError("price is required")
        amount = to_decimal(value)
        if amount < 0:
            raise InvalidEntityError(f"price must not be negative, got {amount}")
        cents = amount.quantize(Money.QUANTUM)
        if cents != amount:
            raise InvalidEntityError(
                f"price must not have more than two decimal places, got {amount}"
            )
        return cents

    @validates("stock_quantity")
    def _validate_stock_quantity(self, key: str, value: Optional[int]) -> Optional[int]:
        if value is not None and value < 0:
            raise InvalidEntityError(f"stock_quantity must not be negative, got {value}")
        return value
