"""
Transaction History Queries

Deterministic filtering for the history view: sort, search, filter by
type and group by day. Everything works on the in-memory list; nothing
here touches storage.
"""

from collections.abc import Iterable
from datetime import date
from enum import Enum
from typing import Union

from moneyflow.models.finance import Category, Transaction, TransactionType


UNKNOWN_CATEGORY_LABEL = "Khác"
UNKNOWN_CATEGORY_LIST_COLOR = "#cccccc"


class TypeFilter(str, Enum):
    ALL = "ALL"
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


def _find_category(category_id: str, categories: Iterable[Category]):
    return next((c for c in categories if c.id == category_id), None)


def category_label(category_id: str, categories: Iterable[Category]) -> str:
    category = _find_category(category_id, categories)
    return category.name if category else UNKNOWN_CATEGORY_LABEL


def category_list_color(category_id: str, categories: Iterable[Category]) -> str:
    category = _find_category(category_id, categories)
    return category.color if category else UNKNOWN_CATEGORY_LIST_COLOR


def sort_newest_first(transactions: Iterable[Transaction]) -> list[Transaction]:
    """By transaction date, newest first. Same-day order is kept."""
    return sorted(transactions, key=lambda t: t.date, reverse=True)


def matches_search(
    transaction: Transaction,
    term: str,
    categories: Iterable[Category],
) -> bool:
    """Case-insensitive match against the note or the category name."""
    needle = term.strip().lower()
    if not needle:
        return True
    if transaction.note and needle in transaction.note.lower():
        return True
    category = _find_category(transaction.category_id, categories)
    return category is not None and needle in category.name.lower()


def filter_transactions(
    transactions: Iterable[Transaction],
    categories: list[Category],
    search: str = "",
    type_filter: Union[TypeFilter, str] = TypeFilter.ALL,
) -> list[Transaction]:
    """Sorted newest first, then narrowed by search term and type."""
    wanted = TypeFilter(type_filter)
    result = []
    for t in sort_newest_first(transactions):
        if wanted != TypeFilter.ALL and t.type != TransactionType(wanted.value):
            continue
        if not matches_search(t, search, categories):
            continue
        result.append(t)
    return result


def group_by_date(transactions: Iterable[Transaction]) -> dict[date, list[Transaction]]:
    """Ordered mapping of day -> transactions, in the order first seen."""
    groups: dict[date, list[Transaction]] = {}
    for t in transactions:
        groups.setdefault(t.date, []).append(t)
    return groups
