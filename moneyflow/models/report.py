"""
Derived Report Models

Everything here is computed from the transaction list and a reference
date. None of it is ever persisted.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class MonthlySummary(BaseModel):
    """Cash-flow totals for one calendar month."""
    model_config = ConfigDict(frozen=True)

    year: int
    month: int = Field(ge=1, le=12)
    total_income: Decimal = Decimal("0")
    total_expense: Decimal = Decimal("0")
    # Category name -> summed expense, in first-seen order
    expense_by_category: dict[str, Decimal] = Field(default_factory=dict)
    transaction_count: int = Field(default=0, ge=0)

    @property
    def balance(self) -> Decimal:
        return self.total_income - self.total_expense

    @property
    def categorized_expense(self) -> Decimal:
        """Expense total that resolved to a known category."""
        return sum(self.expense_by_category.values(), Decimal("0"))


class CategorySlice(BaseModel):
    """One wedge of the category breakdown chart."""
    model_config = ConfigDict(frozen=True)

    name: str
    amount: Decimal
    color: str


class BudgetUsage(BaseModel):
    """How much of a category's monthly budget has been spent."""
    model_config = ConfigDict(frozen=True)

    category_id: str
    category_name: str
    spent: Decimal
    budget: Decimal

    @property
    def ratio(self) -> float:
        if self.budget <= 0:
            return 1.0 if self.spent > 0 else 0.0
        return float(self.spent / self.budget)

    @property
    def is_over_budget(self) -> bool:
        return self.spent > self.budget


class DashboardSnapshot(BaseModel):
    """
    Everything the dashboard shows for one reference day.

    `burn_ratio` is the amortized burn as a share of the daily limit,
    capped at 1.0 for progress-bar display.
    """
    model_config = ConfigDict(frozen=True)

    as_of: date
    summary: MonthlySummary
    days_remaining: int
    daily_limit: Decimal
    amortized_daily_burn: Decimal
    is_over_daily_limit: bool
    burn_ratio: float = Field(ge=0.0, le=1.0)
    chart: list[CategorySlice] = Field(default_factory=list)
    budgets: list[BudgetUsage] = Field(default_factory=list)
