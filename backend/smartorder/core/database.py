"""
Database configuration and session management.

Provides SQLAlchemy async engine setup, the session factory, and the
scoped transaction helper every store operation runs inside.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    AsyncEngine,
    create_async_engine,
    async_sessionmaker,
)
from sqlalchemy.pool import StaticPool

from smartorder.core.config import settings
from smartorder.core.logging_config import get_logger
from smartorder.models.base import Base

logger = get_logger(__name__)


def _unicode_lower(value):  # noqa: ANN001, ANN201
    """SQLite lower() replacement that folds every cased letter, not just A-Z."""
    if isinstance(value, str):
        return value.lower()
    return value


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Create and configure an async SQLAlchemy engine.

    For SQLite:
    - Uses StaticPool (one shared connection, required for :memory:)
    - Enables check_same_thread=False for async compatibility
    - Turns on foreign key enforcement for every new connection

    Args:
        database_url: SQLAlchemy URL with an async driver
        echo: Log every emitted SQL statement

    Returns:
        Configured AsyncEngine instance
    """
    is_sqlite = database_url.startswith("sqlite")

    # SQLite-specific connection arguments (noop for other drivers)
    connect_args: dict = {"check_same_thread": False} if is_sqlite else {}

    engine_kwargs = {
        "echo": echo,
        "connect_args": connect_args,
    }

    # SQLite works best with StaticPool; let other drivers use defaults
    if is_sqlite:
        engine_kwargs["poolclass"] = StaticPool

    engine = create_async_engine(database_url, **engine_kwargs)

    # SQLite leaves foreign keys unchecked unless asked per connection,
    # and its built-in lower() only folds ASCII letters.
    if is_sqlite:
        @event.listens_for(engine.sync_engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, connection_record):  # noqa: ANN001
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            # The lower() indexes call the replacement below
            cursor.execute("PRAGMA trusted_schema=ON")
            cursor.close()
            dbapi_connection.create_function(
                "lower", 1, _unicode_lower, deterministic=True
            )

    return engine


def build_session_maker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Create a session factory for the given engine.

    Objects stay readable after commit so stores can hand detached
    entities back to their callers.
    """
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,  # Don't expire objects after commit
        autoflush=False,
    )


# Global async engine instance
# Created once at import time; no connection is opened until first use
engine = build_engine(settings.database_url, echo=settings.sql_echo)

# Global session factory, the default for stores built by the application
async_session_maker = build_session_maker(engine)


@asynccontextmanager
async def transaction(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """
    Open a session and a transaction around one unit of work.

    Commits when the block exits normally, rolls back and re-raises on any
    exception, and closes the session on every path.

    Example:
        async with transaction(async_session_maker) as session:
            session.add(Category(name="Beverages"))
    """
    async with session_factory() as session:
        try:
            async with session.begin():
                yield session
        finally:
            await session.close()


async def create_schema(bind: Optional[AsyncEngine] = None) -> None:
    """Create every table registered on Base.metadata."""
    # Import models to ensure metadata is populated before create_all()
    from smartorder import models  # noqa: F401

    target = bind or engine
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema created", extra={"tables": len(Base.metadata.tables)})


async def drop_schema(bind: Optional[AsyncEngine] = None) -> None:
    """Drop every table registered on Base.metadata."""
    from smartorder import models  # noqa: F401

    target = bind or engine
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    logger.info("Database schema dropped")


async def init_db() -> None:
    """
    Initialize the database.

    For production, run migrations instead of create_all().
    To allow create_all for local/dev, set CREATE_SCHEMA_ON_STARTUP=1.
    """
    if settings.create_schema_on_startup:
        await create_schema(engine)
    else:
        logger.info("Skipping create_all (CREATE_SCHEMA_ON_STARTUP is off)")


async def close_db() -> None:
    """
    Close the database connection.

    Should be called at application shutdown to cleanly close
    all database connections.
    """
    await engine.dispose()
