"""Adapter exceptions.

These exceptions are raised by every adapter operation and should be
caught and handled by the authentication framework calling it.
"""


class AdapterError(Exception):
    """Base exception for all storage adapter errors."""

    def __init__(self, message: str = "Storage adapter error"):
        self.message = message
        super().__init__(self.message)


class NotFoundError(AdapterError):
    """Raised when an operation targets an entity that does not exist."""

    def __init__(self, entity: str, key: object):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} not found: {key}")


class ConstraintViolationError(AdapterError):
    """Raised when a write would break a uniqueness invariant."""

    def __init__(self, entity: str, constraint: str):
        self.entity = entity
        self.constraint = constraint
        super().__init__(f"{entity} violates unique constraint: {constraint}")


class StorageUnavailableError(AdapterError):
    """Raised when the backing database could not be reached or timed out."""

    def __init__(self, message: str = "Storage backend is unavailable"):
        super().__init__(message)
