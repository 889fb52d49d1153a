"""Weekly heatmap builder - weekday x category expense intensity"""

from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from ledger_analytics.domain.categories import sum_by_category
from ledger_analytics.domain.exceptions import InvalidWindowError
from ledger_analytics.domain.models import DEFAULT_CATEGORY, ZERO, NormalizedTransaction, WeeklyHeatmap
from ledger_analytics.utils.date_utils import weekday_index

DEFAULT_TOP_K = 5

# Label of a named slot left unused when there are fewer than K categories
EMPTY_SLOT_LABEL = ""

# Monday first, matching datetime.weekday()
WEEKDAY_LABELS = ("Segunda", "Terça", "Quarta", "Quinta", "Sexta", "Sábado", "Domingo")


def validate_top_k(top_k: int) -> None:
    if top_k <= 0:
        raise InvalidWindowError(f"heatmap top_k must be > 0, got {top_k}")


def select_columns(
    ranked_categories: Sequence[str],
    top_k: int,
    other_label: str = DEFAULT_CATEGORY,
) -> List[str]:
    """
    Exactly top_k named slots followed by the catch-all column.

    Slots beyond the number of distinct categories are labelled
    EMPTY_SLOT_LABEL and stay zero. A real category named like the catch-all
    is never given its own column; it always lands in the catch-all.
    """
    top = [name for name in ranked_categories if name != other_label][:top_k]
    return top + [EMPTY_SLOT_LABEL] * (top_k - len(top)) + [other_label]


def build_weekly_heatmap(
    entries: Sequence[NormalizedTransaction],
    ranked_categories: Optional[Sequence[str]] = None,
    top_k: int = DEFAULT_TOP_K,
    other_label: str = DEFAULT_CATEGORY,
) -> WeeklyHeatmap:
    """
    Accumulate expense magnitude into matrix[weekday][column].

    ranked_categories is the category aggregator's output order (largest
    first); when omitted it is recomputed from the entries. The matrix is
    always 7 rows by top_k + 1 columns, zero where nothing was spent.

    Raises:
        InvalidWindowError: If top_k <= 0
    """
    validate_top_k(top_k)
    if ranked_categories is None:
        ranked_categories = [name for name, _ in sum_by_category(entries)]

    columns = select_columns(ranked_categories, top_k, other_label)
    column_of: Dict[str, int] = {
        name: i for i, name in enumerate(columns[:-1]) if name != EMPTY_SLOT_LABEL
    }
    other_column = len(columns) - 1

    matrix: List[List[Decimal]] = [[ZERO] * len(columns) for _ in WEEKDAY_LABELS]
    for txn in entries:
        if not txn.is_expense:
            continue
        column = column_of.get(txn.category, other_column)
        matrix[weekday_index(txn.occurred_at)][column] += txn.value

    return WeeklyHeatmap(
        categories=tuple(columns),
        weekdays=WEEKDAY_LABELS,
        matrix=tuple(tuple(row) for row in matrix),
    )
