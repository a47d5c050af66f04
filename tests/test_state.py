"""
Tests for the StateManager commands.

Every command must persist before the new state becomes current, and the
derived dashboard figures must follow the transaction list.
"""

import json
import pytest
from datetime import date
from decimal import Decimal

from moneyflow.audit import AuditLogger
from moneyflow.models.audit import AuditEventType
from moneyflow.models.finance import (
    AppSettings,
    Category,
    Transaction,
    TransactionType,
    default_categories,
)
from moneyflow.services.storage import (
    TRANSACTIONS_KEY,
    FinanceRepository,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    StorageError,
)
from moneyflow.state import (
    AppState,
    ConfirmationRequiredError,
    DuplicateTransactionError,
    StateManager,
)


class FailingStore(InMemoryKeyValueStore):
    """Store whose writes always fail."""

    def set(self, key, value):
        raise StorageError("disk full")

    def clear(self):
        raise StorageError("disk full")


def make_transaction(tid, amount="300", ttype=TransactionType.EXPENSE, day=date(2024, 1, 1), duration=None):
    return Transaction(
        id=tid,
        amount=Decimal(amount),
        type=ttype,
        category_id="c3" if ttype == TransactionType.EXPENSE else "c1",
        date=day,
        allocation_duration=duration,
    )


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def audit_logger():
    return AuditLogger()


@pytest.fixture
def manager(store, audit_logger):
    manager = StateManager(FinanceRepository(store), audit_logger=audit_logger)
    manager.load()
    return manager


class TestLoading:
    """Tests for the initial load."""

    def test_empty_store_loads_defaults(self, manager):
        state = manager.state
        assert state.transactions == ()
        assert list(state.categories) == default_categories()
        assert state.settings == AppSettings()

    def test_loads_stored_transactions(self, store):
        FinanceRepository(store).save_transactions([make_transaction("t1")])
        manager = StateManager(FinanceRepository(store))
        assert [t.id for t in manager.load().transactions] == ["t1"]

    def test_load_is_audited(self, manager, audit_logger):
        assert audit_logger.recent_events()[0].event_type == AuditEventType.STATE_LOADED


class TestTransactionCommands:
    """Tests for adding and deleting transactions."""

    def test_add_prepends_and_persists(self, manager, store):
        manager.add_transaction(make_transaction("t1"))
        manager.add_transaction(make_transaction("t2"))

        assert [t.id for t in manager.state.transactions] == ["t2", "t1"]
        stored = json.loads(store.get(TRANSACTIONS_KEY))
        assert [r["id"] for r in stored] == ["t2", "t1"]

    def test_add_duplicate_id_rejected(self, manager):
        manager.add_transaction(make_transaction("t1"))
        with pytest.raises(DuplicateTransactionError):
            manager.add_transaction(make_transaction("t1", amount="5"))
        assert len(manager.state.transactions) == 1

    def test_delete_removes_and_updates_totals(self, manager):
        """Totals and burn drop by exactly the deleted transaction's contribution."""
        today = date(2024, 1, 2)
        manager.add_transaction(make_transaction("inc", "10000", TransactionType.INCOME))
        manager.add_transaction(make_transaction("t1", "300", duration=3))
        manager.add_transaction(make_transaction("t2", "50", day=today))

        before = manager.dashboard(today)
        manager.delete_transaction("t1")
        after = manager.dashboard(today)

        assert before.summary.total_expense - after.summary.total_expense == Decimal("300")
        assert before.amortized_daily_burn - after.amortized_daily_burn == Decimal("100")
        assert after.summary.total_income == before.summary.total_income

    def test_delete_unknown_id_is_noop(self, manager, store, audit_logger):
        manager.add_transaction(make_transaction("t1"))
        stored_before = store.get(TRANSACTIONS_KEY)

        state = manager.delete_transaction("missing")

        assert [t.id for t in state.transactions] == ["t1"]
        assert store.get(TRANSACTIONS_KEY) == stored_before
        assert audit_logger.recent_events()[0].event_type == AuditEventType.TRANSACTION_DELETE_MISSED

    def test_failed_write_keeps_old_state(self, audit_logger):
        manager = StateManager(FinanceRepository(FailingStore()), audit_logger=audit_logger)
        manager.load()

        with pytest.raises(StorageError):
            manager.add_transaction(make_transaction("t1"))

        assert manager.state.transactions == ()
        assert audit_logger.recent_events()[0].event_type == AuditEventType.SAVE_FAILED

    def test_failed_file_write_is_not_saved_later(self, tmp_path, monkeypatch):
        """A transaction whose write failed must not reappear after a restart."""
        path = tmp_path / "store.json"
        store = JsonFileKeyValueStore(path)
        manager = StateManager(FinanceRepository(store))
        manager.load()

        def fail(payload):
            raise OSError("disk full")

        monkeypatch.setattr(store, "_write_file", fail)
        with pytest.raises(StorageError):
            manager.add_transaction(make_transaction("ghost"))
        monkeypatch.undo()

        manager.update_settings(dark_mode=True)

        reloaded = StateManager(FinanceRepository(JsonFileKeyValueStore(path))).load()
        assert reloaded.transactions == ()
        assert reloaded.settings.dark_mode is True

    def test_failed_clear_keeps_stored_data(self, tmp_path, monkeypatch):
        path = tmp_path / "store.json"
        store = JsonFileKeyValueStore(path)
        manager = StateManager(FinanceRepository(store))
        manager.load()
        manager.add_transaction(make_transaction("t1"))

        def fail(payload):
            raise OSError("disk full")

        monkeypatch.setattr(store, "_write_file", fail)
        with pytest.raises(StorageError):
            manager.clear_all(confirmed=True)
        monkeypatch.undo()

        manager.update_settings(dark_mode=True)

        reloaded = StateManager(FinanceRepository(JsonFileKeyValueStore(path))).load()
        assert [t.id for t in reloaded.transactions] == ["t1"]


class TestSettingsAndCategories:
    """Tests for the settings and category commands."""

    def test_update_settings_with_changes(self, manager, audit_logger):
        state = manager.update_settings(dark_mode=True)

        assert state.settings.dark_mode is True
        event = audit_logger.recent_events()[0]
        assert event.event_type == AuditEventType.SETTINGS_UPDATED
        assert event.details["changed_fields"] == ["dark_mode"]

    def test_update_settings_with_record(self, manager, store):
        manager.update_settings(AppSettings(currency="usd", daily_limit_enabled=False))

        reloaded = FinanceRepository(store).load_settings()
        assert reloaded.currency == "USD"
        assert reloaded.daily_limit_enabled is False

    def test_update_categories(self, manager, store):
        categories = default_categories() + [
            Category(id="c9", name="Cà phê", type=TransactionType.EXPENSE, color="#14b8a6"),
        ]
        manager.update_categories(categories)

        assert len(manager.state.categories) == 9
        assert FinanceRepository(store).load_categories()[-1].name == "Cà phê"

    def test_add_category_uses_next_palette_color(self, manager, store):
        state = manager.add_category("Cà phê", TransactionType.EXPENSE, budget=Decimal("300000"))

        added = state.categories[-1]
        assert added.name == "Cà phê"
        assert added.color == "#ef4444"
        assert added.budget == Decimal("300000")
        assert FinanceRepository(store).load_categories()[-1] == added

    def test_income_category_has_no_budget(self, manager):
        state = manager.add_category("Freelance", TransactionType.INCOME, budget=Decimal("1"))
        assert state.categories[-1].budget is None

    def test_remove_category_keeps_transactions(self, manager):
        manager.add_transaction(make_transaction("t1"))

        state = manager.remove_category("c3")

        assert "c3" not in [c.id for c in state.categories]
        assert [t.id for t in state.transactions] == ["t1"]
        assert manager.dashboard(date(2024, 1, 1)).summary.expense_by_category == {}

    def test_remove_unknown_category_is_noop(self, manager, audit_logger):
        before = manager.state
        assert manager.remove_category("nope") is before
        assert audit_logger.recent_events()[0].event_type != AuditEventType.CATEGORIES_UPDATED


class TestClearAll:
    """Tests for the destructive reset."""

    def test_requires_confirmation(self, manager, audit_logger):
        manager.add_transaction(make_transaction("t1"))

        with pytest.raises(ConfirmationRequiredError):
            manager.clear_all()

        assert len(manager.state.transactions) == 1
        assert audit_logger.recent_events()[0].event_type == AuditEventType.CLEAR_REJECTED

    def test_confirmed_clear_resets_everything(self, manager, store):
        manager.add_transaction(make_transaction("t1"))
        manager.update_settings(dark_mode=True)
        manager.update_categories(default_categories()[:2])

        state = manager.clear_all(confirmed=True)

        assert state == AppState()
        assert store.keys() == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
