# ruff: noqa: E501 - Long import paths in __init__.py re-exports
"""SQLAlchemy implementation of the auth storage adapter.

Provides:
- AuthTables: Core table definitions for one model mapping
- SQLAlchemyAdapter: Adapter implementation over an AsyncEngine
- create_auth_engine / create_engine_from_settings: engine construction
- create_schema / drop_schema: table management
"""

from authstore.infrastructure.persistence.sqlalchemy.adapter import SQLAlchemyAdapter
from authstore.infrastructure.persistence.sqlalchemy.engine import (
    create_auth_engine,
    create_engine_from_settings,
)
from authstore.infrastructure.persistence.sqlalchemy.errors import (
    translate_storage_errors,
)
from authstore.infrastructure.persistence.sqlalchemy.init_db import (
    create_schema,
    drop_schema,
)
from authstore.infrastructure.persistence.sqlalchemy.tables import AuthTables

__all__ = [
    "AuthTables",
    "SQLAlchemyAdapter",
    "create_auth_engine",
    "create_engine_from_settings",
    "create_schema",
    "drop_schema",
    "translate_storage_errors",
]
