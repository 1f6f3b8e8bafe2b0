"""
Generic store for single-table CRUD.

Every concrete store extends BaseStore with its entity's query methods.
Each public operation runs in its own session and transaction, so stores
hold no state beyond their session factory and can be shared freely.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Generic, Optional, Type, TypeVar

from sqlalchemy import Column, Select, delete, exists, func, literal, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from smartorder.core.database import transaction
from smartorder.core.logging_config import get_logger, log_with_context
from smartorder.models.base import Base

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


def contains_pattern(column, text: str):  # noqa: ANN001, ANN201
    """
    Case-insensitive substring predicate.

    Wildcards in `text` are escaped so '%' and '_' match literally. The
    escaped pattern must be a plain string, so `text` is folded in Python;
    SQLite connections fold with the same str.lower (see core.database).
    """
    return func.lower(column).contains(text.lower(), autoescape=True)


def equals_ignore_case(column, text: str):  # noqa: ANN001, ANN201
    """Case-insensitive equality predicate, both sides folded by the backend."""
    return func.lower(column) == func.lower(literal(text))


class BaseStore(Generic[ModelT]):
    """
    Store for one entity type backed by one table.

    Provides save, find_by_id, find_all, exists_by_id, count, delete_by_id
    and delete_all. Retrieval returns None or an empty list when nothing
    matches; backend errors propagate after rollback.

    Attributes:
        model: ORM class the store persists
        session_factory: Factory producing one AsyncSession per operation
    """

    model: Type[ModelT]

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        """
        Initialize store with a session factory.

        Args:
            session_factory: async_sessionmaker bound to the target engine
        """
        self.session_factory = session_factory

    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[AsyncSession]:
        """Run one operation inside a scoped transaction, logging failures."""
        try:
            async with transaction(self.session_factory) as session:
                yield session
        except Exception:
            log_with_context(
                logger,
                "error",
                "Store operation failed, transaction rolled back",
                store=type(self).__name__,
                operation=operation,
                exc_info=True,
            )
            raise

    async def _scalars(self, operation: str, stmt: Select) -> list[ModelT]:
        async with self._transaction(operation) as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def _first(self, operation: str, stmt: Select) -> Optional[ModelT]:
        async with self._transaction(operation) as session:
            result = await session.execute(stmt.limit(1))
            return result.scalars().first()

    async def _exists(self, operation: str, *criteria) -> bool:  # noqa: ANN002
        async with self._transaction(operation) as session:
            result = await session.execute(select(exists().where(*criteria)))
            return bool(result.scalar())

    # ── WRITE ─────────────────────────────────────────────

    async def save(self, entity: ModelT) -> ModelT:
        """
        Insert or update an entity.

        An entity without id is inserted and receives a new id. An entity
        with an id updates the stored row, copying every mutable column and
        keeping id and immutable columns such as created_at. A None left on
        a required column with a default (Product.active, User.role) writes
        that default, as an insert would. If no row has that id, the entity
        is inserted as a new row with a fresh id.

        Args:
            entity: Instance of the store's model

        Returns:
            The persisted instance, detached and fully populated

        Raises:
            IntegrityError: If a backend constraint rejects the write
        """
        async with self._transaction("save") as session:
            if entity.id is None:
                session.add(entity)
                saved = entity
            else:
                stored = await session.get(self.model, entity.id)
                if stored is None:
                    saved = self._copy_as_new(entity)
                    session.add(saved)
                else:
                    for column in self.model.mutable_columns():
                        setattr(stored, column.key, self._update_value(entity, column))
                    saved = stored
            await session.flush()

        log_with_context(
            logger,
            "debug",
            "Saved entity",
            store=type(self).__name__,
            operation="save",
            entity_id=saved.id,
        )
        return saved

    @staticmethod
    def _update_value(entity: ModelT, column: Column) -> Any:
        """
        Value an update writes for `column`.

        None on a NOT NULL column with a scalar default becomes that default,
        matching what an insert of the same instance would store.
        """
        value = getattr(entity, column.key)
        if value is None and not column.nullable and column.default is not None:
            if column.default.is_scalar:
                return column.default.arg
        return value

    def _copy_as_new(self, entity: ModelT) -> ModelT:
        """Fresh transient instance carrying the entity's mutable values."""
        values = {}
        for key in self.model.mutable_column_names():
            value = getattr(entity, key)
            if value is not None:
                values[key] = value
        return self.model(**values)

    async def delete_by_id(self, entity_id: int) -> None:
        """
        Delete the row with the given id.

        Unknown ids are ignored, so the call is idempotent.
        """
        async with self._transaction("delete_by_id") as session:
            await self._delete_row(session, entity_id)

        log_with_context(
            logger,
            "debug",
            "Deleted entity",
            store=type(self).__name__,
            operation="delete_by_id",
            entity_id=entity_id,
        )

    async def _delete_row(self, session: AsyncSession, entity_id: int) -> None:
        await session.execute(delete(self.model).where(self.model.id == entity_id))

    async def delete_all(self) -> None:
        """Delete every row of the table."""
        async with self._transaction("delete_all") as session:
            await session.execute(delete(self.model))

    # ── READ ──────────────────────────────────────────────

    async def find_by_id(self, entity_id: int) -> Optional[ModelT]:
        """
        Retrieve an entity by primary key.

        Returns:
            Instance if found, None otherwise
        """
        async with self._transaction("find_by_id") as session:
            return await session.get(self.model, entity_id)

    async def find_all(self) -> list[ModelT]:
        """Retrieve every entity, ordered by id."""
        return await self._scalars("find_all", select(self.model).order_by(self.model.id))

    async def exists_by_id(self, entity_id: int) -> bool:
        """True if a row with this id exists."""
        return await self._exists("exists_by_id", self.model.id == entity_id)

    async def count(self) -> int:
        """Number of rows in the table."""
        async with self._transaction("count") as session:
            result = await session.execute(select(func.count()).select_from(self.model))
            return int(result.scalar_one())
