"""
Pytest configuration and shared fixtures.

This module provides:
- Environment variable setup for tests
- A fresh in-memory database per test
- Store fixtures bound to that database
"""

import os
import sys
from pathlib import Path

import pytest


# Set test environment variables BEFORE any imports
# This must happen first to ensure settings load with test values
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CATEGORY_DELETE_POLICY"] = "restrict"
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ["LOG_JSON"] = "true"

# Add backend directory to path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))


@pytest.fixture
def anyio_backend():
    """
    Configure anyio backend for async tests.

    Returns:
        str: Backend name ("asyncio")
    """
    return "asyncio"


@pytest.fixture(scope="function")
async def db_engine(anyio_backend):
    """
    Provide an engine on a private in-memory database.

    Creates tables before the test and drops them after.
    """
    from smartorder.core.database import build_engine, create_schema, drop_schema

    engine = build_engine("sqlite+aiosqlite:///:memory:")
    await create_schema(engine)

    yield engine

    await drop_schema(engine)
    await engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory bound to the per-test engine."""
    from smartorder.core.database import build_session_maker

    return build_session_maker(db_engine)


@pytest.fixture
def category_store(session_factory):
    from smartorder.repositories import CategoryStore

    return CategoryStore(session_factory)


@pytest.fixture
def product_store(session_factory):
    from smartorder.repositories import ProductStore

    return ProductStore(session_factory)


@pytest.fixture
def user_store(session_factory):
    from smartorder.repositories import UserStore

    return UserStore(session_factory)
