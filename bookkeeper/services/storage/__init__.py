"""
Storage Services Package

Provides the abstract per-user storage interface, the record codec and
the JSON file implementation.
"""

from bookkeeper.services.storage.interface import (
    DocumentFormatError,
    StorageError,
    UserStorageInterface,
)
from bookkeeper.services.storage.json_store import JsonUserStore
from bookkeeper.services.storage.rwlock import ReadWriteLock

__all__ = [
    # Interfaces
    "UserStorageInterface",
    # Exceptions
    "DocumentFormatError",
    "StorageError",
    # JSON file implementation
    "JsonUserStore",
    "ReadWriteLock",
]
