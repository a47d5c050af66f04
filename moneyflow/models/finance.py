"""
Core Data Models for MoneyFlow

These models define the schemas for all data flowing through the system.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Be serializable for storage and logging

DESIGN DECISION: Stored records are frozen. A transaction is never edited
in place; it is created once and later removed by id.
"""

import secrets
import string
import time
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """
    Cash-flow direction of a transaction.

    Every transaction is exactly one of the two.
    """
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


# =============================================================================
# HELPERS
# =============================================================================

_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_id(length: int = 9) -> str:
    """Short random identifier for new records."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


def now_millis() -> int:
    """Creation timestamp in epoch milliseconds."""
    return int(time.time() * 1000)


# =============================================================================
# STORED RECORDS
# =============================================================================

class Category(BaseModel):
    """
    A user-editable spending or income category.

    `budget` is an optional monthly ceiling and only makes sense
    for expense categories.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=100)
    type: TransactionType
    budget: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Monthly budget for this category"
    )
    color: str = Field(
        default="#6b7280",
        pattern=r"^#[0-9a-fA-F]{6}$",
        description="Display color as #rrggbb"
    )


class Transaction(BaseModel):
    """
    A single income or expense entry.

    `allocation_duration` spreads an expense over that many consecutive
    days starting on `date`. Absent or non-positive means a single day.
    It has no effect on INCOME transactions.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(default_factory=generate_id, min_length=1)
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Amount in whole currency units"
    )
    type: TransactionType
    category_id: str
    date: date
    note: Optional[str] = Field(default=None, max_length=500)
    tags: Optional[list[str]] = None
    allocation_duration: Optional[int] = Field(
        default=None,
        description="Number of days this cost is spread over"
    )
    created_at: int = Field(
        default_factory=now_millis,
        description="Creation time (epoch ms), not used in any totals"
    )

    @property
    def effective_duration(self) -> int:
        """Allocation duration with the single-day default applied."""
        if self.allocation_duration is None or self.allocation_duration <= 0:
            return 1
        return self.allocation_duration

    @property
    def is_expense(self) -> bool:
        return self.type == TransactionType.EXPENSE

    @property
    def is_income(self) -> bool:
        return self.type == TransactionType.INCOME


class AppSettings(BaseModel):
    """
    User preferences.

    The Google Sheet fields are placeholders only; nothing syncs with them.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    currency: str = Field(default="VND", min_length=3, max_length=3)
    dark_mode: bool = False
    daily_limit_enabled: bool = True
    google_sheet_id: Optional[str] = None
    is_sheet_connected: bool = False

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.upper()


# =============================================================================
# SEED DATA
# =============================================================================

DEFAULT_CATEGORIES: tuple[Category, ...] = (
    Category(id="c1", name="Lương", type=TransactionType.INCOME, color="#10b981"),
    Category(id="c2", name="Thưởng/Khác", type=TransactionType.INCOME, color="#34d399"),
    Category(id="c3", name="Ăn uống", type=TransactionType.EXPENSE, budget=Decimal("5000000"), color="#f59e0b"),
    Category(id="c4", name="Di chuyển", type=TransactionType.EXPENSE, budget=Decimal("1000000"), color="#3b82f6"),
    Category(id="c5", name="Điện nước", type=TransactionType.EXPENSE, budget=Decimal("2000000"), color="#8b5cf6"),
    Category(id="c6", name="Giải trí", type=TransactionType.EXPENSE, budget=Decimal("1500000"), color="#ec4899"),
    Category(id="c7", name="Mua sắm", type=TransactionType.EXPENSE, budget=Decimal("3000000"), color="#f43f5e"),
    Category(id="c8", name="Khác", type=TransactionType.EXPENSE, budget=Decimal("1000000"), color="#6b7280"),
)

# Palette offered when the user creates a new category
CATEGORY_COLORS: tuple[str, ...] = (
    "#10b981", "#3b82f6", "#f59e0b", "#ef4444", "#8b5cf6",
    "#ec4899", "#14b8a6", "#f97316", "#6b7280",
)


def next_category_color(categories: list[Category]) -> str:
    """First palette colour not yet used, cycling once the palette is exhausted."""
    used = {c.color.lower() for c in categories}
    for color in CATEGORY_COLORS:
        if color not in used:
            return color
    return CATEGORY_COLORS[len(categories) % len(CATEGORY_COLORS)]


def default_categories() -> list[Category]:
    """Fresh list of the seed categories."""
    return list(DEFAULT_CATEGORIES)


def default_settings(currency: str = "VND") -> AppSettings:
    return AppSettings(currency=currency)


# =============================================================================
# FORM INPUT AND VALIDATION MODELS
# =============================================================================

class TransactionDraft(BaseModel):
    """
    Raw values from the add-transaction form.

    This is PROPOSED data. It goes through TransactionValidator before a
    Transaction is built from it.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    amount: Decimal = Field(default=Decimal("0"))
    type: TransactionType = TransactionType.EXPENSE
    category_id: Optional[str] = None
    date: date
    note: Optional[str] = None
    allocation_duration: int = Field(default=1)


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'future_date')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """Outcome of validating a transaction draft."""

    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "warning"]
