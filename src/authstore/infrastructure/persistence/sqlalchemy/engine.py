"""Async database engine construction.

The engine is created by the host process and injected into the adapter;
the adapter never caches one globally.
"""

from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from authstore_config import Settings


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_auth_engine(database_url: str, **kwargs: Any) -> AsyncEngine:
    """Create an async engine for the auth tables.

    SQLite connections get foreign key enforcement switched on so that
    cascading deletes behave as they do on PostgreSQL.
    """
    kwargs.setdefault("pool_pre_ping", True)
    engine = create_async_engine(database_url, **kwargs)
    if engine.dialect.name == "sqlite":
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """Create an engine from application settings. The caller disposes it."""
    return create_auth_engine(settings.database_url, echo=settings.database_echo)
