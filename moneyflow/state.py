"""
Application State

DESIGN DECISION: The whole in-memory state is one immutable AppState owned
by a StateManager. The only way to change it is through a command:

- add_transaction
- delete_transaction
- update_settings
- update_categories (add_category and remove_category build on it)
- clear_all

Each command builds a new AppState, writes the affected collection to the
repository, and only then swaps the new state in. If the write fails the
old state stays current and the StorageError reaches the caller.

Derived figures (totals, daily limit, burn) are never stored here; they
are recomputed from `state.transactions` whenever they are asked for.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from moneyflow.audit import AuditLogger, create_correlation_id
from moneyflow.engine.budget import build_dashboard
from moneyflow.models.audit import AuditEventBuilder
from moneyflow.models.finance import (
    AppSettings,
    Category,
    Transaction,
    TransactionType,
    default_categories,
    default_settings,
    generate_id,
    next_category_color,
)
from moneyflow.models.report import DashboardSnapshot
from moneyflow.services.storage import FinanceRepository, StorageError


class AppState(BaseModel):
    """Snapshot of everything the user has stored."""
    model_config = ConfigDict(frozen=True)

    # Newest first by construction
    transactions: tuple[Transaction, ...] = ()
    categories: tuple[Category, ...] = Field(default_factory=lambda: tuple(default_categories()))
    settings: AppSettings = Field(default_factory=default_settings)


class ConfirmationRequiredError(Exception):
    """A destructive command was issued without explicit confirmation."""
    pass


class DuplicateTransactionError(ValueError):
    """A transaction with the same id is already in the list."""
    pass


class StateManager:
    """
    Owns the AppState and applies commands to it.

    Usage:
        manager = StateManager(repository)
        manager.load()
        manager.add_transaction(transaction)
        snapshot = manager.dashboard(date.today())
    """

    def __init__(
        self,
        repository: FinanceRepository,
        audit_logger: Optional[AuditLogger] = None,
        correlation_id: Optional[UUID] = None,
    ):
        self._repository = repository
        self._audit_logger = audit_logger or AuditLogger()
        self._correlation_id = correlation_id or create_correlation_id()
        self._state = AppState()

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def correlation_id(self) -> UUID:
        return self._correlation_id

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit_logger

    def _persist(self, key: str, write, *args: Any) -> None:
        try:
            write(*args)
        except StorageError as e:
            self._audit_logger.log(
                AuditEventBuilder.save_failed(key, str(e), self._correlation_id)
            )
            raise

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def load(self) -> AppState:
        """Read all three collections once; falls back to defaults."""
        self._state = AppState(
            transactions=tuple(self._repository.load_transactions()),
            categories=tuple(self._repository.load_categories()),
            settings=self._repository.load_settings(),
        )
        self._audit_logger.log(
            AuditEventBuilder.state_loaded(
                len(self._state.transactions),
                len(self._state.categories),
            )
        )
        return self._state

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def add_transaction(self, transaction: Transaction) -> AppState:
        """Prepend a new transaction."""
        if any(t.id == transaction.id for t in self._state.transactions):
            raise DuplicateTransactionError(f"Transaction {transaction.id} already exists")

        transactions = (transaction,) + self._state.transactions
        self._persist("transactions", self._repository.save_transactions, transactions)
        self._state = self._state.model_copy(update={"transactions": transactions})

        self._audit_logger.log(
            AuditEventBuilder.transaction_added(
                transaction_id=transaction.id,
                transaction_type=transaction.type.value,
                amount=str(transaction.amount),
                allocation_days=transaction.effective_duration,
                correlation_id=self._correlation_id,
            )
        )
        return self._state

    def delete_transaction(self, transaction_id: str) -> AppState:
        """Remove the transaction with this id. Unknown ids change nothing."""
        remaining = tuple(t for t in self._state.transactions if t.id != transaction_id)
        found = len(remaining) != len(self._state.transactions)

        if found:
            self._persist("transactions", self._repository.save_transactions, remaining)
            self._state = self._state.model_copy(update={"transactions": remaining})

        self._audit_logger.log(
            AuditEventBuilder.transaction_deleted(transaction_id, found, self._correlation_id)
        )
        return self._state

    def update_settings(self, settings: Optional[AppSettings] = None, **changes: Any) -> AppState:
        """
        Replace the settings record.

        Pass a full AppSettings, or keyword changes applied to the current one.
        """
        current = self._state.settings
        if settings is None:
            settings = AppSettings.model_validate({**current.model_dump(), **changes})

        changed = [
            name for name in AppSettings.model_fields
            if getattr(current, name) != getattr(settings, name)
        ]

        self._persist("settings", self._repository.save_settings, settings)
        self._state = self._state.model_copy(update={"settings": settings})

        self._audit_logger.log(
            AuditEventBuilder.settings_updated(changed, self._correlation_id)
        )
        return self._state

    def update_categories(self, categories: list[Category]) -> AppState:
        """Replace the whole category set."""
        new_categories = tuple(categories)
        self._persist("categories", self._repository.save_categories, new_categories)
        self._state = self._state.model_copy(update={"categories": new_categories})

        self._audit_logger.log(
            AuditEventBuilder.categories_updated(len(new_categories), self._correlation_id)
        )
        return self._state

    def add_category(
        self,
        name: str,
        category_type: TransactionType,
        budget: Optional[Decimal] = None,
        color: Optional[str] = None,
    ) -> AppState:
        """Append a new category; colour defaults to the next unused palette entry."""
        current = list(self._state.categories)
        category = Category(
            id=generate_id(),
            name=name,
            type=category_type,
            budget=budget if category_type == TransactionType.EXPENSE else None,
            color=color or next_category_color(current),
        )
        return self.update_categories(current + [category])

    def remove_category(self, category_id: str) -> AppState:
        """
        Drop a category. Its transactions stay and show under the generic label.

        Unknown ids change nothing.
        """
        remaining = [c for c in self._state.categories if c.id != category_id]
        if len(remaining) == len(self._state.categories):
            return self._state
        return self.update_categories(remaining)

    def clear_all(self, confirmed: bool = False) -> AppState:
        """
        Delete every stored record and return to defaults.

        Raises:
            ConfirmationRequiredError: Unless `confirmed` is True
        """
        if not confirmed:
            self._audit_logger.log(AuditEventBuilder.clear_rejected(self._correlation_id))
            raise ConfirmationRequiredError(
                "Clearing all data is irreversible and must be confirmed"
            )

        removed = len(self._state.transactions)
        self._persist("all", self._repository.clear)
        # The store is empty now, so these return the seed defaults
        self._state = AppState(
            categories=tuple(self._repository.load_categories()),
            settings=self._repository.load_settings(),
        )

        self._audit_logger.log(
            AuditEventBuilder.data_cleared(removed, self._correlation_id)
        )
        return self._state

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def dashboard(self, now: date) -> DashboardSnapshot:
        """Recompute every dashboard figure from the current transactions."""
        return build_dashboard(
            list(self._state.transactions),
            list(self._state.categories),
            now,
        )
