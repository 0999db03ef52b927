"""
Database fixtures for adapter tests.

Unit tests run against a SQLite file in the test's tmp_path, which gives
every test an empty database without any server. Integration tests start
an ephemeral PostgreSQL via Testcontainers.

Usage:
    from tests.shared.fixtures.database import sqlite_engine

    async def test_something(sqlite_engine):
        adapter = SQLAlchemyAdapter(sqlite_engine)
        await adapter.create_schema()
"""

import pytest
import pytest_asyncio
from sqlalchemy import func, inspect, select
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.pool import NullPool

from authstore.infrastructure.persistence.sqlalchemy import create_auth_engine

# Use same Postgres major version as production
POSTGRES_IMAGE = "postgres:16-alpine"


@pytest_asyncio.fixture(scope="function")
async def sqlite_engine(tmp_path):
    """Async engine on a fresh SQLite file, disposed after the test."""
    engine = create_auth_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'authstore.db'}",
        poolclass=NullPool,
    )
    yield engine
    await engine.dispose()


@pytest.fixture(scope="session")
def postgres_container():
    """
    Start a PostgreSQL container for the test session.

    The container is shared across all tests in the session for performance.
    Each test drops and recreates its own tables.
    """
    from testcontainers.postgres import PostgresContainer

    with PostgresContainer(POSTGRES_IMAGE) as postgres:
        yield postgres


@pytest_asyncio.fixture(scope="function")
async def postgres_engine(postgres_container):
    """Async engine connected to the test container."""
    connection_url = postgres_container.get_connection_url()
    # Testcontainers may return postgresql+psycopg2:// or postgresql://
    async_url = connection_url.replace("postgresql+psycopg2://", "postgresql+asyncpg://")
    async_url = async_url.replace("postgresql://", "postgresql+asyncpg://")

    engine = create_auth_engine(async_url, poolclass=NullPool)
    yield engine
    await engine.dispose()


async def count_rows(engine: AsyncEngine, table) -> int:
    """Count rows in a table, bypassing the adapter."""
    async with engine.connect() as conn:
        result = await conn.execute(select(func.count()).select_from(table))
        return result.scalar_one()


async def table_names(engine: AsyncEngine) -> set[str]:
    """Physical table names present in the database."""
    async with engine.connect() as conn:
        return set(await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names()))
