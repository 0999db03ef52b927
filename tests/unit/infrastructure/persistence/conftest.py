"""
Pytest fixtures for adapter persistence tests.

Every test using ``adapter`` runs once per schema variant against a fresh
SQLite database with the default table names.
"""

import pytest
import pytest_asyncio

from authstore import SchemaVariant, SQLAlchemyAdapter
from tests.shared.fixtures.database import sqlite_engine

__all__ = ["sqlite_engine"]

TEST_EMAIL = "test@example.com"
TEST_EMAIL_2 = "test2@example.com"


@pytest_asyncio.fixture(params=list(SchemaVariant), ids=lambda v: v.value)
async def adapter(request, sqlite_engine) -> SQLAlchemyAdapter:
    """Adapter with its schema created, one per schema variant."""
    adapter = SQLAlchemyAdapter(sqlite_engine, variant=request.param)
    await adapter.create_schema()
    return adapter


@pytest_asyncio.fixture
async def user(adapter):
    """A stored user with an email address."""
    return await adapter.create_user(name="Test User", email=TEST_EMAIL)


@pytest.fixture
def missing_id() -> str:
    """An id that names no row under either variant."""
    return "999999"
