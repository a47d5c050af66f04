"""
Storage Services Package

Provides the key-value storage interface, its implementations, and the
repository that maps the stored strings to transactions, categories and
settings.
"""

from moneyflow.services.storage.interface import (
    CorruptDataError,
    KeyValueStore,
    StorageError,
)
from moneyflow.services.storage.json_file import JsonFileKeyValueStore
from moneyflow.services.storage.memory import InMemoryKeyValueStore
from moneyflow.services.storage.repository import (
    CATEGORIES_KEY,
    SETTINGS_KEY,
    TRANSACTIONS_KEY,
    FinanceRepository,
)

__all__ = [
    # Interface
    "KeyValueStore",
    # Exceptions
    "CorruptDataError",
    "StorageError",
    # Implementations
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    # Repository
    "CATEGORIES_KEY",
    "SETTINGS_KEY",
    "TRANSACTIONS_KEY",
    "FinanceRepository",
]
