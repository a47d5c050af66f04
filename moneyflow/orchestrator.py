"""
Main Orchestrator for MoneyFlow

This module ties the components together and defines the two flows the
UI drives:
1. Bookkeeping (form -> validate -> add / delete -> persist)
2. Commentary (month summary -> AI agent -> advisory)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Drafts are validated before they become transactions
- The AI agent only ever sees aggregates from the budget engine
- Commentary failures never touch the financial state
"""

from datetime import date
from typing import Optional

import structlog

from moneyflow.agents import CommentaryAgent, SpendingInsight
from moneyflow.audit import AuditLogger, configure_logging
from moneyflow.config import get_settings
from moneyflow.engine.budget import summarize_month
from moneyflow.models.audit import AuditEventBuilder
from moneyflow.models.finance import TransactionDraft, ValidationResult
from moneyflow.services.storage import (
    FinanceRepository,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
)
from moneyflow.state import AppState, StateManager
from moneyflow.validation import TransactionValidator


logger = structlog.get_logger(__name__)


class BookkeepingFlow:
    """
    Turns form drafts into stored transactions.

    Flow:
    1. Validate the draft against the current categories
    2. If there are errors, stop and return them
    3. Build the Transaction and add it through the StateManager
    """

    def __init__(
        self,
        state_manager: StateManager,
        validator: Optional[TransactionValidator] = None,
    ):
        self._state_manager = state_manager
        self._validator = validator or TransactionValidator()

    def validate(self, draft: TransactionDraft, today: date) -> ValidationResult:
        return self._validator.validate(
            draft,
            list(self._state_manager.state.categories),
            today,
        )

    def submit(
        self,
        draft: TransactionDraft,
        today: date,
    ) -> tuple[ValidationResult, Optional[AppState]]:
        """
        Validate and save a draft.

        Returns:
            (validation, new_state). new_state is None when the draft
            had errors and nothing was saved.
        """
        validation = self.validate(draft, today)
        if not validation.is_valid:
            return validation, None

        transaction = self._validator.build_transaction(draft)
        return validation, self._state_manager.add_transaction(transaction)

    def delete(self, transaction_id: str) -> AppState:
        return self._state_manager.delete_transaction(transaction_id)


class CommentaryFlow:
    """
    Requests AI commentary for the current month.

    The agent never raises; this flow only assembles its input.
    """

    def __init__(
        self,
        state_manager: StateManager,
        agent: Optional[CommentaryAgent] = None,
    ):
        self._state_manager = state_manager
        self._agent = agent or CommentaryAgent(audit_logger=state_manager.audit_logger)

    async def request(self, now: date) -> SpendingInsight:
        state = self._state_manager.state
        summary = summarize_month(state.transactions, state.categories, now)
        self._state_manager.audit_logger.log(
            AuditEventBuilder.commentary_requested(
                summary.year,
                summary.month,
                summary.transaction_count,
                self._state_manager.correlation_id,
            )
        )
        return await self._agent.analyze(
            summary,
            correlation_id=self._state_manager.correlation_id,
        )


def create_store(use_storage: bool = True) -> KeyValueStore:
    """The JSON file store from settings, or an in-memory one."""
    if not use_storage:
        return InMemoryKeyValueStore()
    return JsonFileKeyValueStore(get_settings().storage.store_path)


def create_app_components(
    use_storage: bool = True,
    store: Optional[KeyValueStore] = None,
) -> tuple[StateManager, BookkeepingFlow, CommentaryFlow]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Persist to the local JSON file. Set to False to keep
                     everything in memory (tests, demos).
        store: Explicit store, overrides use_storage.

    Returns:
        (state_manager, bookkeeping_flow, commentary_flow), already loaded
    """
    app_settings = get_settings().app
    configure_logging(app_settings.log_level)

    audit_logger = AuditLogger()
    store = store or create_store(use_storage)
    repository = FinanceRepository(
        store,
        audit_logger=audit_logger,
        default_currency=app_settings.default_currency,
    )

    state_manager = StateManager(repository, audit_logger=audit_logger)
    state_manager.load()

    bookkeeping_flow = BookkeepingFlow(
        state_manager,
        validator=TransactionValidator(app_settings),
    )
    commentary_flow = CommentaryFlow(state_manager)

    logger.info(
        "app_components_created",
        store=type(store).__name__,
        environment=app_settings.app_environment,
    )
    return state_manager, bookkeeping_flow, commentary_flow
