"""authstore - relational storage adapter for authentication frameworks.

This package stores the entities an authentication flow needs:
- Users and their linked OAuth accounts
- Sessions (time-bounded, expiry derived from the clock)
- Verification requests (single-use, identifier-keyed)

The framework talks to the abstract Adapter; SQLAlchemyAdapter maps each
call onto four tables whose names are set by a ModelMapping.
"""

from authstore.adapter import Adapter
from authstore.domain import (
    Account,
    ExpiredCleanup,
    ModelMapping,
    SchemaVariant,
    Session,
    User,
    VerificationRequest,
)
from authstore.exceptions import (
    AdapterError,
    ConstraintViolationError,
    NotFoundError,
    StorageUnavailableError,
)
from authstore.infrastructure.persistence.sqlalchemy import (
    AuthTables,
    SQLAlchemyAdapter,
    create_auth_engine,
    create_engine_from_settings,
)

__all__ = [
    # Adapter
    "Adapter",
    "SQLAlchemyAdapter",
    # Domain
    "Account",
    "ExpiredCleanup",
    "ModelMapping",
    "SchemaVariant",
    "Session",
    "User",
    "VerificationRequest",
    # Exceptions
    "AdapterError",
    "ConstraintViolationError",
    "NotFoundError",
    "StorageUnavailableError",
    # Persistence
    "AuthTables",
    "create_auth_engine",
    "create_engine_from_settings",
]
