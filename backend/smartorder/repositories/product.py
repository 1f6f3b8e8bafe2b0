"""
Product store for product CRUD, filters and sort orders.

Products reference their category by id only. The one place that needs the
category row, find_by_id_with_category, joins it explicitly.
"""

from decimal import ROUND_CEILING, ROUND_FLOOR, Decimal
from typing import Optional, Union

from sqlalchemy import select

from smartorder.models.base import Money, to_decimal
from smartorder.models.category import Category
from smartorder.models.product import Product
from smartorder.repositories.base import BaseStore, contains_pattern, equals_ignore_case

Amount = Union[Decimal, int, float, str]


class ProductStore(BaseStore[Product]):
    """
    Store for the products table.

    Filters return products ordered by id unless the method name states a
    sort order; sorted queries break ties by id.
    """

    model = Product

    async def find_by_name_ignore_case(self, name: str) -> Optional[Product]:
        """
        Find the product whose name equals `name`, ignoring case.

        Returns:
            Product if found, None otherwise
        """
        stmt = select(Product).where(equals_ignore_case(Product.name, name)).order_by(Product.id)
        return await self._first("find_by_name_ignore_case", stmt)

    async def find_by_name_ignore_case_containing(self, text: str) -> list[Product]:
        """Products whose name contains `text`, ignoring case."""
        stmt = (
            select(Product)
            .where(contains_pattern(Product.name, text))
            .order_by(Product.id)
        )
        return await self._scalars("find_by_name_ignore_case_containing", stmt)

    async def find_by_category_id(self, category_id: int) -> list[Product]:
        """Products in the given category."""
        stmt = select(Product).where(Product.category_id == category_id).order_by(Product.id)
        return await self._scalars("find_by_category_id", stmt)

    async def find_by_active(self, active: bool) -> list[Product]:
        """Products whose active flag equals `active`."""
        stmt = select(Product).where(Product.active == bool(active)).order_by(Product.id)
        return await self._scalars("find_by_active", stmt)

    async def find_by_category_id_and_active(
        self,
        category_id: int,
        active: bool
    ) -> list[Product]:
        """Products in the given category with the given active flag."""
        stmt = (
            select(Product)
            .where(
                Product.category_id == category_id,
                Product.active == bool(active),
            )
            .order_by(Product.id)
        )
        return await self._scalars("find_by_category_id_and_active", stmt)

    async def find_by_price_between(
        self,
        min_price: Amount,
        max_price: Amount
    ) -> list[Product]:
        """
        Products priced within [min_price, max_price], both ends included.

        Bounds are compared as exact decimals; floats are accepted through
        their string form. Prices are whole cents, so a bound with more
        digits is narrowed inward to the nearest cent before the query.
        A range with min_price > max_price matches nothing.
        """
        low = to_decimal(min_price).quantize(Money.QUANTUM, rounding=ROUND_CEILING)
        high = to_decimal(max_price).quantize(Money.QUANTUM, rounding=ROUND_FLOOR)
        stmt = (
            select(Product)
            .where(Product.price.between(low, high))
            .order_by(Product.id)
        )
        return await self._scalars("find_by_price_between", stmt)

    async def find_all_by_order_by_price_asc(self) -> list[Product]:
        """All products, cheapest first."""
        stmt = select(Product).order_by(Product.price.asc(), Product.id.asc())
        return await self._scalars("find_all_by_order_by_price_asc", stmt)

    async def find_all_by_order_by_name_asc(self) -> list[Product]:
        """All products sorted by name, ascending."""
        stmt = select(Product).order_by(Product.name.asc(), Product.id.asc())
        return await self._scalars("find_all_by_order_by_name_asc", stmt)

    async def find_by_id_with_category(
        self,
        product_id: int
    ) -> Optional[tuple[Product, Category]]:
        """
        Fetch a product together with its category in one joined query.

        Returns:
            (product, category) if the product exists, None otherwise
        """
        stmt = (
            select(Product, Category)
            .join(Category, Product.category_id == Category.id)
            .where(Product.id == product_id)
        )
        async with self._transaction("find_by_id_with_category") as session:
            row = (await session.execute(stmt)).first()
        if row is None:
            return None
        return row[0], row[1]
