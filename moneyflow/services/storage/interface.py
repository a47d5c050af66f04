"""
Abstract Storage Interface

DESIGN DECISION: Persistence is a plain string key-value store, the same
shape as browser local storage. This allows us to:
1. Keep a single JSON file on disk for the real app
2. Use in-memory storage for testing
3. Keep the repository's encoding logic independent of where bytes go

The interface is intentionally tiny. The repository on top of it knows
about transactions, categories and settings; the store does not.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStore(ABC):
    """
    Abstract interface for string key-value storage.

    Values are opaque strings; callers do their own serialization.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read the value stored under `key`.

        Returns:
            The stored string, or None if the key is absent
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Store `value` under `key`, replacing any previous value.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Remove `key`.

        Returns:
            True if the key existed
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove every key."""
        pass

    @abstractmethod
    def keys(self) -> list[str]:
        """All keys currently stored."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptDataError(StorageError):
    """A stored value could not be decoded."""
    pass
