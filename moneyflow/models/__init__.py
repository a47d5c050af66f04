"""
Data Models Package

This package contains all Pydantic models used in MoneyFlow.
All data flowing through the system must conform to these schemas.
"""

from moneyflow.models.finance import (
    CATEGORY_COLORS,
    DEFAULT_CATEGORIES,
    AppSettings,
    Category,
    Transaction,
    TransactionDraft,
    TransactionType,
    ValidationIssue,
    ValidationResult,
    default_categories,
    default_settings,
    generate_id,
    next_category_color,
)
from moneyflow.models.report import (
    BudgetUsage,
    CategorySlice,
    DashboardSnapshot,
    MonthlySummary,
)
from moneyflow.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Stored records
    "AppSettings",
    "Category",
    "Transaction",
    "TransactionType",
    "CATEGORY_COLORS",
    "DEFAULT_CATEGORIES",
    "default_categories",
    "default_settings",
    "generate_id",
    "next_category_color",
    # Form input
    "TransactionDraft",
    "ValidationIssue",
    "ValidationResult",
    # Reports
    "BudgetUsage",
    "CategorySlice",
    "DashboardSnapshot",
    "MonthlySummary",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
