"""
Transaction Form Validation

DESIGN DECISION: Validation happens before a Transaction is built.

ERRORS (block saving):
- Amount missing or not positive
- No category selected
- Expense allocation outside 1..max_allocation_days

WARNINGS (shown, do not block):
- Category id that does not exist in the current category set
- Category whose type differs from the transaction type
- Date in the future

IMPORTANT: Validation NEVER silently fixes issues.
The only normalization applied when building the transaction is the
documented one: income is never allocated over several days.
"""

from datetime import date, timedelta
from typing import Optional

from moneyflow.config import GeneralSettings, get_settings
from moneyflow.engine.allocation import clamp_custom_days, stored_duration
from moneyflow.models.finance import (
    Category,
    Transaction,
    TransactionDraft,
    TransactionType,
    ValidationIssue,
    ValidationResult,
)


class TransactionValidator:
    """Checks a TransactionDraft against the current category set."""

    def __init__(self, settings: Optional[GeneralSettings] = None):
        self._settings = settings or get_settings().app

    def validate(
        self,
        draft: TransactionDraft,
        categories: list[Category],
        today: date,
    ) -> ValidationResult:
        issues: list[ValidationIssue] = []

        if draft.amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than zero",
                severity="error",
            ))

        if not draft.category_id:
            issues.append(ValidationIssue(
                field="category_id",
                issue_type="missing",
                message="Please choose a category",
                severity="error",
            ))
        else:
            category = next((c for c in categories if c.id == draft.category_id), None)
            if category is None:
                issues.append(ValidationIssue(
                    field="category_id",
                    issue_type="unknown_category",
                    message=f"Category {draft.category_id} does not exist; it will show as 'Khác'",
                    severity="warning",
                ))
            elif category.type != draft.type:
                issues.append(ValidationIssue(
                    field="category_id",
                    issue_type="type_mismatch",
                    message=(
                        f"Category '{category.name}' is for {category.type.value.lower()}, "
                        f"not {draft.type.value.lower()}"
                    ),
                    severity="warning",
                ))

        tolerance = timedelta(days=self._settings.future_date_tolerance_days)
        if draft.date > today + tolerance:
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Date {draft.date.isoformat()} is in the future",
                severity="warning",
            ))

        # Income is stored as a single day whatever the form sent
        max_days = self._settings.max_allocation_days
        out_of_range = draft.allocation_duration < 1 or draft.allocation_duration > max_days
        if draft.type == TransactionType.EXPENSE and out_of_range:
            issues.append(ValidationIssue(
                field="allocation_duration",
                issue_type="out_of_range",
                message=f"Allocation must be between 1 and {max_days} days",
                severity="error",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return ValidationResult(is_valid=is_valid, issues=issues)

    def build_transaction(self, draft: TransactionDraft) -> Transaction:
        """
        Create the Transaction for a draft that passed validation.

        Raises:
            ValueError: If the draft has no category
        """
        if not draft.category_id:
            raise ValueError("Cannot build a transaction without a category")
        days = clamp_custom_days(draft.allocation_duration, self._settings.max_allocation_days)
        return Transaction(
            amount=draft.amount,
            type=draft.type,
            category_id=draft.category_id,
            date=draft.date,
            note=draft.note or None,
            allocation_duration=stored_duration(draft.type, days),
        )
