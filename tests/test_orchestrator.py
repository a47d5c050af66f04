"""
Integration tests for the bookkeeping and commentary flows.

Components are wired by create_app_components with an in-memory store.
"""

import asyncio
import pytest
from datetime import date
from decimal import Decimal
from types import SimpleNamespace

from moneyflow.agents import CommentaryAgent
from moneyflow.models.audit import AuditEventType
from moneyflow.models.finance import TransactionDraft, TransactionType
from moneyflow.orchestrator import CommentaryFlow, create_app_components, create_store
from moneyflow.services.storage import InMemoryKeyValueStore


TODAY = date(2024, 1, 2)


@pytest.fixture
def components():
    return create_app_components(store=InMemoryKeyValueStore())


class RecordingModel:
    def __init__(self):
        self.prompts = []

    async def generate_content_async(self, prompt):
        self.prompts.append(prompt)
        return SimpleNamespace(
            text='{"sentiment": "WARNING", "title": "Cẩn thận", '
                 '"message": "Ăn uống hơi nhiều.", "actionItem": "Nấu ăn ở nhà."}'
        )


class TestBookkeepingFlow:
    """Tests for submitting and deleting through the flow."""

    def test_submit_valid_draft(self, components):
        state_manager, bookkeeping, _ = components
        draft = TransactionDraft(
            amount=Decimal("300"),
            type=TransactionType.EXPENSE,
            category_id="c3",
            date=date(2024, 1, 1),
            allocation_duration=3,
        )

        validation, state = bookkeeping.submit(draft, TODAY)

        assert validation.is_valid
        assert state.transactions[0].allocation_duration == 3
        assert state_manager.dashboard(TODAY).amortized_daily_burn == Decimal("100")

    def test_submit_invalid_draft_saves_nothing(self, components):
        state_manager, bookkeeping, _ = components
        draft = TransactionDraft(amount=Decimal("0"), category_id=None, date=TODAY)

        validation, state = bookkeeping.submit(draft, TODAY)

        assert validation.error_count == 2
        assert state is None
        assert state_manager.state.transactions == ()

    def test_delete(self, components):
        state_manager, bookkeeping, _ = components
        _, state = bookkeeping.submit(
            TransactionDraft(amount=Decimal("50"), category_id="c4", date=TODAY),
            TODAY,
        )

        bookkeeping.delete(state.transactions[0].id)

        assert state_manager.state.transactions == ()


class TestCommentaryFlow:
    """Tests for requesting commentary."""

    def test_request_sends_month_aggregates(self, components):
        state_manager, bookkeeping, _ = components
        bookkeeping.submit(
            TransactionDraft(amount=Decimal("5000000"), type=TransactionType.INCOME, category_id="c1", date=TODAY),
            TODAY,
        )
        bookkeeping.submit(
            TransactionDraft(amount=Decimal("80000"), category_id="c3", date=TODAY, note="bí mật"),
            TODAY,
        )
        model = RecordingModel()
        flow = CommentaryFlow(state_manager, agent=CommentaryAgent(model=model))

        insight = asyncio.run(flow.request(TODAY))

        assert insight.title == "Cẩn thận"
        assert '"count": 2' in model.prompts[0]
        assert "bí mật" not in model.prompts[0]

        requested = [
            e for e in state_manager.audit_logger.recent_events()
            if e.event_type == AuditEventType.COMMENTARY_REQUESTED
        ]
        assert len(requested) == 1
        assert requested[0].entity_id == "2024-01"
        assert requested[0].details["transaction_count"] == 2
        assert requested[0].correlation_id == state_manager.correlation_id


class TestFactories:
    """Tests for the component factories."""

    def test_create_store_in_memory(self):
        assert isinstance(create_store(use_storage=False), InMemoryKeyValueStore)

    def test_components_share_state(self, components):
        state_manager, bookkeeping, commentary = components
        assert state_manager.state.settings.currency == "VND"
        assert len(state_manager.state.categories) == 8


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
