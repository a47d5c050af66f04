"""
Allocation presets for the add-transaction form.

The chosen number of days is stored verbatim on the transaction and only
the daily burn calculation reads it.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from moneyflow.engine.budget import days_remaining_in_month
from moneyflow.models.finance import TransactionType


MAX_ALLOCATION_DAYS = 365


class AllocationPreset(str, Enum):
    NONE = "none"
    THREE_DAYS = "3_days"
    SEVEN_DAYS = "7_days"
    END_OF_MONTH = "end_of_month"
    CUSTOM = "custom"

    @property
    def label(self) -> str:
        return _PRESET_LABELS[self]


_PRESET_LABELS = {
    AllocationPreset.NONE: "Không",
    AllocationPreset.THREE_DAYS: "3 ngày",
    AllocationPreset.SEVEN_DAYS: "7 ngày",
    AllocationPreset.END_OF_MONTH: "Hết tháng",
    AllocationPreset.CUSTOM: "Tùy chọn",
}

_FIXED_DAYS = {
    AllocationPreset.NONE: 1,
    AllocationPreset.THREE_DAYS: 3,
    AllocationPreset.SEVEN_DAYS: 7,
}


def clamp_custom_days(
    value: Union[int, str, None],
    max_days: int = MAX_ALLOCATION_DAYS,
) -> int:
    """Custom input as an int in [1, max_days]; anything unparseable is 1."""
    try:
        days = int(value)
    except (TypeError, ValueError):
        return 1
    return max(1, min(days, max_days))


def resolve_allocation(
    preset: AllocationPreset,
    transaction_date: date,
    custom_days: Union[int, str, None] = None,
    max_days: int = MAX_ALLOCATION_DAYS,
) -> int:
    """
    Number of days for a preset.

    END_OF_MONTH counts from the transaction's own date, not from today,
    so a purchase back-dated to the 25th is spread to the end of that month.
    """
    if preset in _FIXED_DAYS:
        return _FIXED_DAYS[preset]
    if preset == AllocationPreset.END_OF_MONTH:
        remaining = days_remaining_in_month(transaction_date)
        return remaining if remaining > 0 else 1
    return clamp_custom_days(custom_days, max_days)


def matching_preset(days: int, transaction_date: date) -> Optional[AllocationPreset]:
    """
    Which preset button should show as selected for `days`.

    END_OF_MONTH is matched on the exact remaining-day count for the date.
    """
    for preset, fixed in _FIXED_DAYS.items():
        if days == fixed:
            return preset
    if days == days_remaining_in_month(transaction_date):
        return AllocationPreset.END_OF_MONTH
    return None


def stored_duration(transaction_type: TransactionType, days: int) -> int:
    """Income is never allocated."""
    if transaction_type == TransactionType.INCOME:
        return 1
    return max(1, days)


def per_day_preview(amount: Decimal, days: int) -> Optional[Decimal]:
    """Rounded per-day amount shown under the presets, or None for one day."""
    if days <= 1:
        return None
    return (Decimal(amount) / days).quantize(Decimal("1"))
