"""History query package."""

from moneyflow.queries.history import (
    UNKNOWN_CATEGORY_LABEL,
    UNKNOWN_CATEGORY_LIST_COLOR,
    TypeFilter,
    category_label,
    category_list_color,
    filter_transactions,
    group_by_date,
    matches_search,
    sort_newest_first,
)

__all__ = [
    "UNKNOWN_CATEGORY_LABEL",
    "UNKNOWN_CATEGORY_LIST_COLOR",
    "TypeFilter",
    "category_label",
    "category_list_color",
    "filter_transactions",
    "group_by_date",
    "matches_search",
    "sort_newest_first",
]
