"""Aggregation queries over loaded user documents."""

from bookkeeper.queries.aggregates import (
    newest_first,
    reminders_between,
    summarize_by_category,
    total_by_kind,
    total_expense,
    total_income,
)

__all__ = [
    "newest_first",
    "reminders_between",
    "summarize_by_category",
    "total_by_kind",
    "total_expense",
    "total_income",
]
