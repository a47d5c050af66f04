"""Validation package."""

from moneyflow.validation.validator import TransactionValidator

__all__ = ["TransactionValidator"]
