"""
Category store for category CRUD and name lookups.
"""

from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from smartorder.core.config import settings
from smartorder.core.exceptions import ConfigurationError
from smartorder.models.category import Category
from smartorder.models.product import Product
from smartorder.repositories.base import BaseStore, contains_pattern, equals_ignore_case

DELETE_POLICIES = ("restrict", "cascade")


class CategoryStore(BaseStore[Category]):
    """
    Store for the categories table.

    Deleting a category that products still reference follows the delete
    policy: "restrict" leaves the foreign key to reject the delete with an
    IntegrityError, "cascade" removes those products in the same
    transaction first.

    Attributes:
        delete_policy: "restrict" or "cascade"
    """

    model = Category

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        delete_policy: Optional[str] = None,
    ):
        """
        Initialize store.

        Args:
            session_factory: async_sessionmaker bound to the target engine
            delete_policy: Overrides settings.category_delete_policy

        Raises:
            ConfigurationError: If the policy is not a known one
        """
        super().__init__(session_factory)
        policy = delete_policy or settings.category_delete_policy
        if policy not in DELETE_POLICIES:
            raise ConfigurationError(
                f"Unknown category delete policy {policy!r}, expected one of {DELETE_POLICIES}"
            )
        self.delete_policy = policy

    async def _delete_row(self, session: AsyncSession, entity_id: int) -> None:
        if self.delete_policy == "cascade":
            await session.execute(delete(Product).where(Product.category_id == entity_id))
        await super()._delete_row(session, entity_id)

    async def find_by_name_ignore_case(self, name: str) -> Optional[Category]:
        """
        Find the category whose name equals `name`, ignoring case.

        Returns:
            Category if found, None otherwise
        """
        stmt = select(Category).where(equals_ignore_case(Category.name, name))
        return await self._first("find_by_name_ignore_case", stmt)

    async def find_by_name_containing_ignore_case(self, text: str) -> list[Category]:
        """Categories whose name contains `text`, ignoring case."""
        stmt = (
            select(Category)
            .where(contains_pattern(Category.name, text))
            .order_by(Category.id)
        )
        return await self._scalars("find_by_name_containing_ignore_case", stmt)

    async def find_all_by_order_by_name_asc(self) -> list[Category]:
        """All categories sorted by name, ascending."""
        stmt = select(Category).order_by(Category.name.asc(), Category.id.asc())
        return await self._scalars("find_all_by_order_by_name_asc", stmt)
