# error types raised by the storage package

from typing import Optional


class StorageError(Exception):
    """Base class for every failure surfaced by a Storage implementation.

    `operation` names the storage call that failed, e.g. "make order".
    """

    def __init__(self, operation: str, detail: Optional[str] = None):
        self.operation = operation
        self.detail = detail
        message = f"{operation} failed"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class StorageUnavailableError(StorageError):
    """Driver or connectivity failure, or the storage is not open."""


class ConstraintViolationError(StorageError):
    """A write broke a key or foreign-key constraint."""


class MissingGeneratedKeyError(StorageError):
    """An insert completed without producing a store-assigned key."""


class UnknownOrderStatusError(StorageError, ValueError):
    """Text that does not name a known order status."""
