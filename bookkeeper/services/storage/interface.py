"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for per-user storage.
This allows us to:
1. Swap the JSON file store for a database later
2. Use in-memory or failing stores in tests
3. Keep the ledger service decoupled from the file system

The interface is intentionally tiny: a user's whole document is the only
unit that is ever read or written.
"""

from abc import ABC, abstractmethod
from typing import Optional

from bookkeeper.models.ledger import UserData, UserProfile


class UserStorageInterface(ABC):
    """
    Abstract interface for per-user document storage.

    Implementations must serialize writes against all reads and writes,
    and may let reads run concurrently.
    """

    @abstractmethod
    def save_user(self, data: UserData) -> bool:
        """
        Persist a complete user document, replacing any previous one.

        Args:
            data: The full document; data.profile.id addresses it

        Returns:
            True if the whole document was written
        """
        pass

    @abstractmethod
    def load_user(self, user_id: str) -> Optional[UserData]:
        """
        Load a user document.

        Args:
            user_id: The user's unique identifier

        Returns:
            The document, or None if it is absent or unreadable
        """
        pass

    @abstractmethod
    def list_profiles(self) -> list[UserProfile]:
        """
        Profiles of every readable document.

        Unreadable documents are skipped. Order is unspecified.
        """
        pass

    @abstractmethod
    def remove_user(self, user_id: str) -> bool:
        """
        Delete a user document.

        Returns:
            True if a document was deleted
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class DocumentFormatError(StorageError):
    """A stored document is not a well-formed user document."""
    pass
