"""
Aggregation Queries

DESIGN DECISION: Aggregation is DETERMINISTIC and side-effect free.
Every function here takes data that was already loaded from storage and
folds it; none of them touch the store. The ledger service loads a
document, hands it here, and returns whatever comes back.
"""

from datetime import datetime, timezone
from typing import Iterable

from bookkeeper.models.ledger import (
    Bill,
    BillType,
    CategorySummary,
    Reminder,
    SocialPost,
    UserData,
    ensure_utc,
)


# Posts with an invalid timestamp sort after every dated post
_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def summarize_by_category(data: UserData) -> list[CategorySummary]:
    """
    One summary per existing category, in category order.

    Bills whose category_id matches no summary are skipped; the upsert
    rules make that impossible for data written by the service.
    """
    summaries = [
        CategorySummary(category_id=category.id, name=category.name)
        for category in data.categories
    ]
    by_id: dict[str, CategorySummary] = {}
    for summary in summaries:
        # First category wins when ids repeat in a hand-edited document
        by_id.setdefault(summary.category_id, summary)

    for bill in data.bills:
        summary = by_id.get(bill.category_id)
        if summary is None:
            continue
        if bill.kind == BillType.INCOME:
            summary.income += bill.amount
        else:
            summary.expense += bill.amount
    return summaries


def total_by_kind(bills: Iterable[Bill], kind: BillType) -> float:
    total = 0.0
    for bill in bills:
        if bill.kind == kind:
            total += bill.amount
    return total


def total_income(bills: Iterable[Bill]) -> float:
    return total_by_kind(bills, BillType.INCOME)


def total_expense(bills: Iterable[Bill]) -> float:
    return total_by_kind(bills, BillType.EXPENSE)


def reminders_between(
    reminders: Iterable[Reminder],
    start: datetime,
    end: datetime,
) -> list[Reminder]:
    """
    Enabled reminders with start <= remind_at <= end, in store order.

    Reminders without a valid trigger time never match.
    """
    start = ensure_utc(start)
    end = ensure_utc(end)
    return [
        reminder for reminder in reminders
        if reminder.enabled
        and reminder.remind_at is not None
        and start <= reminder.remind_at <= end
    ]


def newest_first(posts: Iterable[SocialPost]) -> list[SocialPost]:
    """Sort posts by creation time, most recent first. Ties keep no defined order."""
    return sorted(
        posts,
        key=lambda post: post.created_at or _OLDEST,
        reverse=True,
    )
