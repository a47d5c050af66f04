"""
Tests for the allocation & budget engine.

Every function here takes the reference day as an argument, so no test
depends on the wall clock.
"""

import pytest
from datetime import date, datetime
from decimal import Decimal

from moneyflow.engine.budget import (
    UNKNOWN_CATEGORY_COLOR,
    amortized_daily_burn,
    build_dashboard,
    burn_ratio,
    category_budget_usage,
    category_chart_data,
    category_color,
    daily_limit,
    days_remaining_in_month,
    is_active_on,
    summarize_month,
)
from moneyflow.models.finance import (
    Category,
    Transaction,
    TransactionType,
    default_categories,
)


CATEGORIES = default_categories()


def expense(amount, day, category_id="c3", duration=None, tid=None):
    return Transaction(
        id=tid or f"e-{day.isoformat()}-{amount}",
        amount=Decimal(str(amount)),
        type=TransactionType.EXPENSE,
        category_id=category_id,
        date=day,
        allocation_duration=duration,
    )


def income(amount, day, category_id="c1", tid=None):
    return Transaction(
        id=tid or f"i-{day.isoformat()}-{amount}",
        amount=Decimal(str(amount)),
        type=TransactionType.INCOME,
        category_id=category_id,
        date=day,
    )


class TestMonthlySummary:
    """Tests for the monthly aggregator."""

    def test_totals_only_cover_reference_month(self):
        """Transactions in other months are ignored."""
        transactions = [
            income(10_000_000, date(2024, 1, 5)),
            expense(300_000, date(2024, 1, 10)),
            expense(200_000, date(2023, 12, 31)),
            expense(100_000, date(2024, 2, 1)),
            income(5_000_000, date(2023, 1, 5)),
        ]
        summary = summarize_month(transactions, CATEGORIES, date(2024, 1, 15))

        assert summary.total_income == Decimal("10000000")
        assert summary.total_expense == Decimal("300000")
        assert summary.balance == Decimal("9700000")
        assert summary.transaction_count == 2

    def test_same_month_different_year_excluded(self):
        """Month and year must both match."""
        transactions = [expense(100, date(2023, 1, 10))]
        summary = summarize_month(transactions, CATEGORIES, date(2024, 1, 10))
        assert summary.total_expense == 0
        assert summary.transaction_count == 0

    def test_balance_is_income_minus_expense(self):
        """income - expense == balance, including a negative balance."""
        transactions = [
            income(1_000, date(2024, 3, 1)),
            expense(2_500, date(2024, 3, 2)),
            expense(700, date(2024, 3, 3), category_id="c4"),
        ]
        summary = summarize_month(transactions, CATEGORIES, date(2024, 3, 20))
        assert summary.total_income - summary.total_expense == summary.balance
        assert summary.balance == Decimal("-2200")

    def test_breakdown_by_category_name(self):
        """Expenses are summed per category name in first-seen order."""
        transactions = [
            expense(100, date(2024, 3, 1), category_id="c4"),
            expense(50, date(2024, 3, 2), category_id="c3"),
            expense(25, date(2024, 3, 3), category_id="c4"),
            income(999, date(2024, 3, 3)),
        ]
        summary = summarize_month(transactions, CATEGORIES, date(2024, 3, 20))
        assert list(summary.expense_by_category) == ["Di chuyển", "Ăn uống"]
        assert summary.expense_by_category["Di chuyển"] == Decimal("125")
        assert summary.expense_by_category["Ăn uống"] == Decimal("50")

    def test_unknown_category_counted_in_total_not_breakdown(self):
        """Orphaned category ids still count towards total expense."""
        transactions = [
            expense(100, date(2024, 3, 1), category_id="c3"),
            expense(40, date(2024, 3, 2), category_id="deleted-category"),
        ]
        summary = summarize_month(transactions, CATEGORIES, date(2024, 3, 20))
        assert summary.total_expense == Decimal("140")
        assert summary.expense_by_category == {"Ăn uống": Decimal("100")}
        orphaned = Decimal("40")
        assert summary.categorized_expense == summary.total_expense - orphaned

    def test_accepts_datetime_reference(self):
        """A datetime reference is reduced to its date."""
        transactions = [expense(100, date(2024, 3, 31))]
        summary = summarize_month(transactions, CATEGORIES, datetime(2024, 3, 31, 23, 59))
        assert summary.total_expense == Decimal("100")

    def test_empty_transactions(self):
        """No transactions gives all-zero totals."""
        summary = summarize_month([], CATEGORIES, date(2024, 3, 20))
        assert summary.balance == 0
        assert summary.expense_by_category == {}


class TestDailyLimit:
    """Tests for days remaining and the daily limit."""

    @pytest.mark.parametrize("day,expected", [
        (date(2024, 1, 1), 31),
        (date(2024, 1, 31), 1),
        (date(2024, 2, 1), 29),
        (date(2024, 2, 29), 1),
        (date(2023, 2, 28), 1),
        (date(2023, 2, 1), 28),
        (date(2024, 4, 15), 16),
        (date(2024, 12, 31), 1),
    ])
    def test_days_remaining_counts_today(self, day, expected):
        """Today counts as a remaining day; month lengths and leap years respected."""
        assert days_remaining_in_month(day) == expected

    def test_limit_divides_balance_by_remaining_days(self):
        """Balance 3000 with two days left allows 1500 per day."""
        assert daily_limit(Decimal("3000"), date(2024, 1, 30)) == Decimal("1500")

    def test_limit_on_last_day_is_whole_balance(self):
        assert daily_limit(Decimal("750"), date(2024, 6, 30)) == Decimal("750")

    def test_negative_balance_floors_at_zero(self):
        """An overspent month shows a limit of 0, never negative."""
        assert daily_limit(Decimal("-5000"), date(2024, 1, 10)) == 0

    @pytest.mark.parametrize("balance", ["-1000000", "-1", "0", "1", "123456789"])
    @pytest.mark.parametrize("day", [
        date(2024, 1, 1), date(2024, 2, 29), date(2023, 2, 28), date(2024, 11, 30),
    ])
    def test_limit_never_negative(self, balance, day):
        assert daily_limit(Decimal(balance), day) >= 0


class TestAmortizedDailyBurn:
    """Tests for the allocation window and the daily burn."""

    def test_three_day_allocation_window(self):
        """300 over 3 days from 2024-01-01 is 100 per day for exactly three days."""
        transactions = [expense(300, date(2024, 1, 1), duration=3)]

        for day in (date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 3)):
            assert amortized_daily_burn(transactions, day) == Decimal("100")

        assert amortized_daily_burn(transactions, date(2023, 12, 31)) == 0
        assert amortized_daily_burn(transactions, date(2024, 1, 4)) == 0

    def test_no_duration_is_single_day(self):
        """Without a duration the whole amount lands on its own date only."""
        transactions = [expense(450, date(2024, 5, 10))]
        assert amortized_daily_burn(transactions, date(2024, 5, 10)) == Decimal("450")
        assert amortized_daily_burn(transactions, date(2024, 5, 9)) == 0
        assert amortized_daily_burn(transactions, date(2024, 5, 11)) == 0

    @pytest.mark.parametrize("duration", [0, -3])
    def test_non_positive_duration_treated_as_one(self, duration):
        transactions = [expense(80, date(2024, 5, 10), duration=duration)]
        assert amortized_daily_burn(transactions, date(2024, 5, 10)) == Decimal("80")
        assert amortized_daily_burn(transactions, date(2024, 5, 11)) == 0

    def test_spills_into_next_month(self):
        """Dated the 30th of a 31-day month for 5 days, still active on the 2nd."""
        transactions = [expense(500, date(2024, 1, 30), duration=5)]
        burn = amortized_daily_burn(transactions, date(2024, 2, 2))
        assert burn > 0
        assert burn == Decimal("100")
        assert amortized_daily_burn(transactions, date(2024, 2, 3)) == Decimal("100")
        assert amortized_daily_burn(transactions, date(2024, 2, 4)) == 0

    def test_income_never_contributes(self):
        transactions = [income(1_000_000, date(2024, 5, 10))]
        assert amortized_daily_burn(transactions, date(2024, 5, 10)) == 0

    def test_income_duration_is_ignored(self):
        """Even a stored duration on income does not make it burn."""
        t = Transaction(
            amount=Decimal("900"),
            type=TransactionType.INCOME,
            category_id="c1",
            date=date(2024, 5, 10),
            allocation_duration=3,
        )
        assert is_active_on(t, date(2024, 5, 11)) is False

    def test_overlapping_allocations_are_summed(self):
        """Rent over 30 days plus a same-day purchase."""
        transactions = [
            expense(3_000_000, date(2024, 1, 1), category_id="c5", duration=30),
            expense(50_000, date(2024, 1, 15)),
            expense(70_000, date(2024, 1, 14)),
        ]
        assert amortized_daily_burn(transactions, date(2024, 1, 15)) == Decimal("150000")

    def test_time_of_day_is_ignored(self):
        """A late-evening reference still falls on the same day."""
        transactions = [expense(300, date(2024, 1, 1), duration=3)]
        assert amortized_daily_burn(transactions, datetime(2024, 1, 3, 23, 59)) == Decimal("100")

    def test_scans_full_history(self):
        """A long allocation from last year still counts today."""
        transactions = [expense(365, date(2023, 6, 1), duration=365)]
        assert amortized_daily_burn(transactions, date(2024, 1, 15)) == Decimal("1")


class TestChartData:
    """Tests for the category-breakdown chart data."""

    def test_slices_follow_breakdown_order_with_colors(self):
        transactions = [
            expense(100, date(2024, 3, 1), category_id="c4"),
            expense(50, date(2024, 3, 2), category_id="c3"),
        ]
        summary = summarize_month(transactions, CATEGORIES, date(2024, 3, 20))
        slices = category_chart_data(summary, CATEGORIES)

        assert [(s.name, s.amount, s.color) for s in slices] == [
            ("Di chuyển", Decimal("100"), "#3b82f6"),
            ("Ăn uống", Decimal("50"), "#f59e0b"),
        ]

    def test_unknown_name_uses_fallback_color(self):
        assert category_color("Nowhere", CATEGORIES) == UNKNOWN_CATEGORY_COLOR

    def test_duplicate_names_first_match_wins(self):
        categories = [
            Category(id="a", name="Food", type=TransactionType.EXPENSE, color="#111111"),
            Category(id="b", name="Food", type=TransactionType.EXPENSE, color="#222222"),
        ]
        assert category_color("Food", categories) == "#111111"


class TestBudgetsAndDashboard:
    """Tests for budget usage and the combined dashboard snapshot."""

    def test_budget_usage_per_category(self):
        transactions = [
            expense(6_000_000, date(2024, 3, 1), category_id="c3"),
            expense(200_000, date(2024, 3, 2), category_id="c4"),
            expense(9_000_000, date(2024, 2, 2), category_id="c4"),
        ]
        usage = {u.category_id: u for u in category_budget_usage(transactions, CATEGORIES, date(2024, 3, 5))}

        assert set(usage) == {"c3", "c4", "c5", "c6", "c7", "c8"}
        assert usage["c3"].is_over_budget is True
        assert usage["c3"].ratio == pytest.approx(1.2)
        assert usage["c4"].spent == Decimal("200000")
        assert usage["c4"].is_over_budget is False
        assert usage["c5"].spent == 0

    def test_over_limit_flag(self):
        """Burn above the daily limit is flagged."""
        transactions = [
            income(1_000, date(2024, 1, 30)),
            expense(900, date(2024, 1, 30)),
        ]
        snapshot = build_dashboard(transactions, CATEGORIES, date(2024, 1, 30))

        assert snapshot.daily_limit == Decimal("50")
        assert snapshot.amortized_daily_burn == Decimal("900")
        assert snapshot.is_over_daily_limit is True
        assert snapshot.burn_ratio == 1.0

    def test_within_limit(self):
        transactions = [
            income(10_000, date(2024, 1, 30)),
            expense(1_000, date(2024, 1, 1), duration=10),
        ]
        snapshot = build_dashboard(transactions, CATEGORIES, date(2024, 1, 5))

        assert snapshot.days_remaining == 27
        assert snapshot.amortized_daily_burn == Decimal("100")
        assert snapshot.is_over_daily_limit is False
        assert 0 < snapshot.burn_ratio < 1

    def test_burn_ratio_with_zero_limit(self):
        """A zero limit divides by one instead of zero."""
        assert burn_ratio(Decimal("0.5"), Decimal("0")) == pytest.approx(0.5)
        assert burn_ratio(Decimal("5"), Decimal("0")) == 1.0

    def test_recomputation_is_idempotent(self):
        """Same inputs give identical results every time."""
        transactions = [
            income(5_000_000, date(2024, 3, 1)),
            expense(3_000_000, date(2024, 3, 1), category_id="c5", duration=31),
            expense(120_000, date(2024, 3, 10), category_id="unknown"),
        ]
        first = build_dashboard(transactions, CATEGORIES, date(2024, 3, 10))
        second = build_dashboard(transactions, CATEGORIES, date(2024, 3, 10))
        assert first == second
        assert first.model_dump() == second.model_dump()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
