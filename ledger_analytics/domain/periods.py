"""Period bucketer - monthly income/expense trend series"""

from collections import defaultdict
from decimal import Decimal
from typing import Dict, List, Sequence, Tuple

from ledger_analytics.domain.exceptions import InvalidWindowError
from ledger_analytics.domain.models import ZERO, MonthlyBucket, NormalizedTransaction
from ledger_analytics.utils.date_utils import (
    generate_month_range,
    month_key,
    month_label,
    month_of,
    shift_month,
)

DEFAULT_MONTHLY_WINDOW = 6


def validate_window(window: int) -> None:
    if window <= 0:
        raise InvalidWindowError(f"monthly window must be > 0, got {window}")


def bucket_by_month(
    entries: Sequence[NormalizedTransaction],
    window: int = DEFAULT_MONTHLY_WINDOW,
) -> List[MonthlyBucket]:
    """
    Group entries into calendar-month buckets.

    Requirements:
    - Key is (year, month), so January 2024 and January 2025 never collide
    - The window ends at the latest month with data and reaches back
      `window` calendar months (inclusive)
    - Every month inside the window from the first month with data onwards
      is emitted, zero-filled when empty, chronologically ascending

    Raises:
        InvalidWindowError: If window <= 0
    """
    validate_window(window)
    if not entries:
        return []

    totals: Dict[Tuple[int, int], Dict[str, Decimal]] = defaultdict(
        lambda: {"income": ZERO, "expenses": ZERO}
    )
    for txn in entries:
        bucket = totals[month_of(txn.occurred_at)]
        if txn.is_income:
            bucket["income"] += txn.value
        else:
            bucket["expenses"] += txn.value

    first_month = min(totals)
    last_month = max(totals)
    window_start = shift_month(last_month[0], last_month[1], -(window - 1))
    start = max(first_month, window_start)

    buckets = []
    for year, month in generate_month_range(start, last_month):
        sums = totals.get((year, month), {"income": ZERO, "expenses": ZERO})
        buckets.append(
            MonthlyBucket(
                month_key=month_key(year, month),
                label=month_label(month),
                income=sums["income"],
                expenses=sums["expenses"],
            )
        )
    return buckets
