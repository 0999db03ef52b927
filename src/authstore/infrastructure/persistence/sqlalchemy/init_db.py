"""Schema creation and removal for the auth tables."""

import logging

from sqlalchemy.ext.asyncio import AsyncEngine

from authstore.infrastructure.persistence.sqlalchemy.tables import AuthTables

logger = logging.getLogger(__name__)


async def create_schema(engine: AsyncEngine, tables: AuthTables) -> None:
    """
    Create the four auth tables (idempotent).

    Uses SQLAlchemy's create_all() which only creates missing tables.
    Existing tables and their data are never modified or deleted.
    """
    async with engine.begin() as conn:
        await conn.run_sync(tables.metadata.create_all)

    logger.info(
        "Auth schema is up to date (%s variant, tables: %s)",
        tables.variant.value,
        ", ".join(tables.mapping.as_dict().values()),
    )


async def drop_schema(engine: AsyncEngine, tables: AuthTables) -> None:
    """
    Drop the four auth tables (USE WITH CAUTION!).

    This is primarily for testing and development reset scenarios.
    """
    logger.warning("Dropping auth tables: %s", ", ".join(tables.mapping.as_dict().values()))

    async with engine.begin() as conn:
        await conn.run_sync(tables.metadata.drop_all)
