"""Allocation & budget engine package."""

from moneyflow.engine.allocation import (
    MAX_ALLOCATION_DAYS,
    AllocationPreset,
    clamp_custom_days,
    matching_preset,
    per_day_preview,
    resolve_allocation,
    stored_duration,
)
from moneyflow.engine.budget import (
    UNKNOWN_CATEGORY_COLOR,
    allocation_window,
    amortized_daily_burn,
    build_dashboard,
    burn_ratio,
    category_budget_usage,
    category_chart_data,
    category_color,
    daily_limit,
    daily_share,
    days_remaining_in_month,
    is_active_on,
    is_over_daily_limit,
    summarize_month,
    transactions_in_month,
)

__all__ = [
    "MAX_ALLOCATION_DAYS",
    "AllocationPreset",
    "clamp_custom_days",
    "matching_preset",
    "per_day_preview",
    "resolve_allocation",
    "stored_duration",
    "UNKNOWN_CATEGORY_COLOR",
    "allocation_window",
    "amortized_daily_burn",
    "build_dashboard",
    "burn_ratio",
    "category_budget_usage",
    "category_chart_data",
    "category_color",
    "daily_limit",
    "daily_share",
    "days_remaining_in_month",
    "is_active_on",
    "is_over_daily_limit",
    "summarize_month",
    "transactions_in_month",
]
