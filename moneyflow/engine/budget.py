"""
Allocation & Budget Engine

Pure functions that turn the transaction list plus a reference day into
the numbers shown on the dashboard:

- monthly income / expense / balance and the per-category breakdown
- the daily spending limit for the rest of the month
- the amortized daily burn of multi-day ("allocated") expenses

DESIGN DECISION: "now" is always passed in. Nothing in this module reads
the wall clock, so every result can be reproduced in a test.

The monthly figures only look at the reference month. The daily burn scans
the whole history, because an expense allocated over 30 days from the
20th of last month is still being paid off today.
"""

import calendar
from collections.abc import Iterable, Sequence
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from moneyflow.models.finance import Category, Transaction, TransactionType
from moneyflow.models.report import (
    BudgetUsage,
    CategorySlice,
    DashboardSnapshot,
    MonthlySummary,
)


ZERO = Decimal("0")

# Chart color for a category name that matches nothing
UNKNOWN_CATEGORY_COLOR = "#9ca3af"


def as_day(value: date) -> date:
    """Strip the time of day from a datetime; dates pass through."""
    if isinstance(value, datetime):
        return value.date()
    return value


def _index_categories(categories: Iterable[Category]) -> dict[str, Category]:
    # First category with a given id wins
    index: dict[str, Category] = {}
    for category in categories:
        index.setdefault(category.id, category)
    return index


# =============================================================================
# MONTHLY AGGREGATION
# =============================================================================

def in_month(transaction: Transaction, reference: date) -> bool:
    """Same calendar month and year as the reference day."""
    return (
        transaction.date.year == reference.year
        and transaction.date.month == reference.month
    )


def transactions_in_month(
    transactions: Iterable[Transaction],
    now: date,
) -> list[Transaction]:
    """Transactions dated in the calendar month of `now`, order preserved."""
    reference = as_day(now)
    return [t for t in transactions if in_month(t, reference)]


def summarize_month(
    transactions: Iterable[Transaction],
    categories: Iterable[Category],
    now: date,
) -> MonthlySummary:
    """
    Sum the month's transactions by type and by expense category.

    Expenses whose category id resolves to nothing still count towards
    `total_expense` but are left out of `expense_by_category`.
    """
    reference = as_day(now)
    by_id = _index_categories(categories)

    total_income = ZERO
    total_expense = ZERO
    breakdown: dict[str, Decimal] = {}
    count = 0

    for t in transactions_in_month(transactions, reference):
        count += 1
        if t.type == TransactionType.INCOME:
            total_income += t.amount
            continue

        total_expense += t.amount
        category = by_id.get(t.category_id)
        if category is not None:
            breakdown[category.name] = breakdown.get(category.name, ZERO) + t.amount

    return MonthlySummary(
        year=reference.year,
        month=reference.month,
        total_income=total_income,
        total_expense=total_expense,
        expense_by_category=breakdown,
        transaction_count=count,
    )


# =============================================================================
# DAILY LIMIT
# =============================================================================

def last_day_of_month(day: date) -> int:
    return calendar.monthrange(day.year, day.month)[1]


def days_remaining_in_month(day: date) -> int:
    """Days left in the month, counting `day` itself."""
    day = as_day(day)
    return last_day_of_month(day) - day.day + 1


def daily_limit(balance: Decimal, now: date) -> Decimal:
    """
    How much can be spent per remaining day without going below zero.

    Never negative: an overspent month gives a limit of 0.
    """
    days = days_remaining_in_month(now)
    if days <= 0:
        return ZERO
    return max(ZERO, Decimal(balance) / days)


# =============================================================================
# AMORTIZED DAILY BURN
# =============================================================================

def allocation_window(transaction: Transaction) -> tuple[date, int]:
    """
    Start day and length of the half-open window [start, start + days).

    A duration of 1 covers the transaction's own day only.
    """
    return transaction.date, transaction.effective_duration


def is_active_on(transaction: Transaction, day: date) -> bool:
    """Does the allocation window of this expense include `day`?"""
    if transaction.type != TransactionType.EXPENSE:
        return False
    start, duration = allocation_window(transaction)
    offset = (as_day(day) - start).days
    return 0 <= offset < duration


def daily_share(transaction: Transaction) -> Decimal:
    """Constant per-day portion of an allocated expense."""
    return transaction.amount / transaction.effective_duration


def amortized_daily_burn(
    transactions: Iterable[Transaction],
    today: date,
) -> Decimal:
    """Sum of today's share of every expense whose window covers today."""
    day = as_day(today)
    burn = ZERO
    for t in transactions:
        if is_active_on(t, day):
            burn += daily_share(t)
    return burn


def is_over_daily_limit(burn: Decimal, limit: Decimal) -> bool:
    return burn > limit


def burn_ratio(burn: Decimal, limit: Decimal) -> float:
    """Burn as a fraction of the limit, clamped to [0, 1] for display."""
    divisor = limit if limit else Decimal("1")
    ratio = float(burn / divisor)
    return max(0.0, min(ratio, 1.0))


# =============================================================================
# CHART DATA
# =============================================================================

def category_color(name: str, categories: Iterable[Category]) -> str:
    """Color of the first category with this name."""
    for category in categories:
        if category.name == name:
            return category.color
    return UNKNOWN_CATEGORY_COLOR


def category_chart_data(
    summary: MonthlySummary,
    categories: Sequence[Category],
) -> list[CategorySlice]:
    """(name, amount, color) slices in breakdown order."""
    return [
        CategorySlice(
            name=name,
            amount=amount,
            color=category_color(name, categories),
        )
        for name, amount in summary.expense_by_category.items()
    ]


# =============================================================================
# CATEGORY BUDGETS
# =============================================================================

def category_budget_usage(
    transactions: Iterable[Transaction],
    categories: Iterable[Category],
    now: date,
) -> list[BudgetUsage]:
    """Spent vs. budget for every expense category that has a budget."""
    month = transactions_in_month(transactions, now)
    usage = []
    for category in categories:
        if category.type != TransactionType.EXPENSE or category.budget is None:
            continue
        spent = sum(
            (t.amount for t in month if t.is_expense and t.category_id == category.id),
            ZERO,
        )
        usage.append(BudgetUsage(
            category_id=category.id,
            category_name=category.name,
            spent=spent,
            budget=category.budget,
        ))
    return usage


# =============================================================================
# DASHBOARD
# =============================================================================

def build_dashboard(
    transactions: Sequence[Transaction],
    categories: Sequence[Category],
    now: date,
    summary: Optional[MonthlySummary] = None,
) -> DashboardSnapshot:
    """Compute every dashboard figure for the reference day."""
    today = as_day(now)
    summary = summary or summarize_month(transactions, categories, today)
    limit = daily_limit(summary.balance, today)
    burn = amortized_daily_burn(transactions, today)

    return DashboardSnapshot(
        as_of=today,
        summary=summary,
        days_remaining=days_remaining_in_month(today),
        daily_limit=limit,
        amortized_daily_burn=burn,
        is_over_daily_limit=is_over_daily_limit(burn, limit),
        burn_ratio=burn_ratio(burn, limit),
        chart=category_chart_data(summary, categories),
        budgets=category_budget_usage(transactions, categories, today),
    )
