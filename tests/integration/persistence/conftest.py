"""
Pytest configuration for adapter integration tests.

Integration tests use Testcontainers for an ephemeral PostgreSQL instance.
Import the shared fixtures to make them available.
"""

import pytest_asyncio

from authstore import SchemaVariant, SQLAlchemyAdapter

# Re-export shared database fixtures
from tests.shared.fixtures.database import (
    postgres_container,
    postgres_engine,
)

__all__ = [
    "postgres_container",
    "postgres_engine",
]


@pytest_asyncio.fixture(params=list(SchemaVariant), ids=lambda v: v.value)
async def pg_adapter(request, postgres_engine):
    """Adapter on fresh PostgreSQL tables, dropped after the test."""
    adapter = SQLAlchemyAdapter(postgres_engine, variant=request.param)
    await adapter.drop_schema()
    await adapter.create_schema()
    yield adapter
    await adapter.drop_schema()
