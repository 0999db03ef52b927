"""Translation of SQLAlchemy/DBAPI failures into adapter exceptions."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    InterfaceError,
    OperationalError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from authstore.exceptions import ConstraintViolationError, StorageUnavailableError


@asynccontextmanager
async def translate_storage_errors(entity: str, constraint: str) -> AsyncIterator[None]:
    """Re-raise storage failures as adapter exceptions.

    ``entity`` and ``constraint`` describe the uniqueness rule a write in
    the block may hit. Adapter exceptions raised inside the block pass
    through unchanged.
    """
    try:
        yield
    except IntegrityError as e:
        raise ConstraintViolationError(entity, constraint) from e
    except (OperationalError, InterfaceError, PoolTimeoutError) as e:
        raise StorageUnavailableError(f"Storage backend is unavailable: {e}") from e
    except DBAPIError as e:
        if e.connection_invalidated:
            raise StorageUnavailableError(f"Storage connection was lost: {e}") from e
        raise
    except OSError as e:
        raise StorageUnavailableError(f"Could not connect to storage backend: {e}") from e
