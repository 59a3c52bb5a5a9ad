"""
Services package.

The ledger service itself lives in bookkeeper.services.ledger; this package
re-exports the storage layer and the error taxonomy it builds on.
"""

from bookkeeper.services.errors import (
    ConflictError,
    LedgerError,
    LedgerValidationError,
    NotFoundError,
    PersistenceError,
)
from bookkeeper.services.storage import (
    DocumentFormatError,
    JsonUserStore,
    ReadWriteLock,
    StorageError,
    UserStorageInterface,
)

__all__ = [
    # Ledger errors
    "ConflictError",
    "LedgerError",
    "LedgerValidationError",
    "NotFoundError",
    "PersistenceError",
    # Storage
    "DocumentFormatError",
    "JsonUserStore",
    "ReadWriteLock",
    "StorageError",
    "UserStorageInterface",
]
