"""Recent activity and per-weekday transaction lists"""

from typing import Dict, List, Sequence, Tuple

from ledger_analytics.domain.exceptions import InvalidWindowError
from ledger_analytics.domain.models import DailyTransaction, NormalizedTransaction, RecentTransaction
from ledger_analytics.utils.date_utils import weekday_index

DEFAULT_RECENT_LIMIT = 5

WEEKDAY_KEYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def validate_recent_limit(limit: int) -> None:
    if limit < 0:
        raise InvalidWindowError(f"recent transactions limit must be >= 0, got {limit}")


def recent_transactions(
    entries: Sequence[NormalizedTransaction],
    limit: int = DEFAULT_RECENT_LIMIT,
) -> List[RecentTransaction]:
    """Newest entries first; same-timestamp entries ordered by id descending"""
    validate_recent_limit(limit)
    newest = sorted(entries, key=lambda t: (t.occurred_at, str(t.id)), reverse=True)[:limit]
    return [
        RecentTransaction(
            id=t.id,
            kind=t.kind,
            category=t.category,
            value=t.value,
            occurred_at=t.occurred_at,
            description=t.description,
        )
        for t in newest
    ]


def daily_transactions(entries: Sequence[NormalizedTransaction]) -> Dict[str, Tuple[DailyTransaction, ...]]:
    """Expense entries grouped by the weekday they fell on, chronological within a day"""
    by_day: Dict[str, List[DailyTransaction]] = {key: [] for key in WEEKDAY_KEYS}
    for txn in sorted(entries, key=lambda t: (t.occurred_at, str(t.id))):
        if txn.is_expense:
            by_day[WEEKDAY_KEYS[weekday_index(txn.occurred_at)]].append(
                DailyTransaction(category=txn.category, amount=txn.value, description=txn.description)
            )
    return {key: tuple(items) for key, items in by_day.items()}
