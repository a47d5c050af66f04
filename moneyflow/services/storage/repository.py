"""
Finance Repository

Reads and writes the three persisted collections on top of any
KeyValueStore:

- transactions: ordered list, newest first
- categories: the user's category set (seeded with defaults)
- settings: one AppSettings record

DESIGN DECISION: Unreadable stored data is "no data", never a crash.
A value that is not valid JSON, or not the expected shape, falls back to
the default for that collection. Individual transaction records that fail
validation are skipped, the rest are kept.

Optional fields that are unset are left out of the stored JSON entirely,
so an absent allocation duration stays distinguishable from a stored one.
"""

import json
from collections.abc import Iterable
from typing import Any, Optional

from pydantic import ValidationError

from moneyflow.audit import AuditLogger
from moneyflow.models.audit import AuditEventBuilder
from moneyflow.models.finance import (
    AppSettings,
    Category,
    Transaction,
    default_categories,
    default_settings,
)
from moneyflow.services.storage.interface import (
    CorruptDataError,
    KeyValueStore,
    StorageError,
)


TRANSACTIONS_KEY = "moneyflow_transactions"
CATEGORIES_KEY = "moneyflow_categories"
SETTINGS_KEY = "moneyflow_settings"


def _dump(records: Iterable[Any]) -> str:
    return json.dumps(
        [r.model_dump(mode="json", exclude_none=True) for r in records],
        ensure_ascii=False,
    )


class FinanceRepository:
    """
    Typed access to the stored transactions, categories and settings.

    Args:
        store: Where the JSON strings live.
        audit_logger: Receives a warning for every fallback to defaults.
        default_currency: Currency for freshly created settings.
    """

    def __init__(
        self,
        store: KeyValueStore,
        audit_logger: Optional[AuditLogger] = None,
        default_currency: str = "VND",
    ):
        self._store = store
        self._audit_logger = audit_logger or AuditLogger()
        self._default_currency = default_currency

    @property
    def store(self) -> KeyValueStore:
        return self._store

    def _read_json(self, key: str) -> Any:
        """
        Decoded value for `key`, or None if absent.

        Raises:
            CorruptDataError: If the stored string is not valid JSON
        """
        raw = self._store.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as e:
            raise CorruptDataError(f"{key} is not valid JSON: {e}")

    def _report_invalid(self, key: str, error: Exception) -> None:
        self._audit_logger.log(AuditEventBuilder.stored_data_invalid(key, str(error)))

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    def load_transactions(self) -> list[Transaction]:
        try:
            data = self._read_json(TRANSACTIONS_KEY)
        except StorageError as e:
            self._report_invalid(TRANSACTIONS_KEY, e)
            return []

        if data is None:
            return []
        if not isinstance(data, list):
            self._report_invalid(TRANSACTIONS_KEY, CorruptDataError("expected a list"))
            return []

        transactions = []
        for index, item in enumerate(data):
            try:
                transactions.append(Transaction.model_validate(item))
            except ValidationError as e:
                self._report_invalid(f"{TRANSACTIONS_KEY}[{index}]", e)
        return transactions

    def save_transactions(self, transactions: Iterable[Transaction]) -> None:
        self._store.set(TRANSACTIONS_KEY, _dump(transactions))

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    def load_categories(self) -> list[Category]:
        """Stored categories, or the seed set when nothing usable is stored."""
        try:
            data = self._read_json(CATEGORIES_KEY)
        except StorageError as e:
            self._report_invalid(CATEGORIES_KEY, e)
            return default_categories()

        if data is None:
            return default_categories()

        try:
            if not isinstance(data, list):
                raise CorruptDataError("expected a list")
            return [Category.model_validate(item) for item in data]
        except (ValidationError, CorruptDataError) as e:
            self._report_invalid(CATEGORIES_KEY, e)
            return default_categories()

    def save_categories(self, categories: Iterable[Category]) -> None:
        self._store.set(CATEGORIES_KEY, _dump(categories))

    # -------------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------------

    def load_settings(self) -> AppSettings:
        try:
            data = self._read_json(SETTINGS_KEY)
        except StorageError as e:
            self._report_invalid(SETTINGS_KEY, e)
            return default_settings(self._default_currency)

        if data is None:
            return default_settings(self._default_currency)

        try:
            return AppSettings.model_validate(data)
        except ValidationError as e:
            self._report_invalid(SETTINGS_KEY, e)
            return default_settings(self._default_currency)

    def save_settings(self, settings: AppSettings) -> None:
        self._store.set(
            SETTINGS_KEY,
            json.dumps(settings.model_dump(mode="json", exclude_none=True), ensure_ascii=False),
        )

    # -------------------------------------------------------------------------
    # Everything
    # -------------------------------------------------------------------------

    def clear(self) -> None:
        """Delete every stored value. Irreversible."""
        self._store.clear()
