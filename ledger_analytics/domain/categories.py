"""Category aggregator - expense totals per category with display colors"""

import hashlib
from collections import defaultdict
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Sequence, Tuple

from ledger_analytics.domain.exceptions import ConfigurationError
from ledger_analytics.domain.models import EXPENSE, ZERO, ExpenseCategory, NormalizedTransaction

CATEGORY_PALETTE = (
    "#1E40AF",
    "#059669",
    "#DC2626",
    "#D97706",
    "#0284C7",
    "#7C3AED",
    "#DB2777",
    "#65A30D",
)

COLOR_POLICY_RANK = "rank"
COLOR_POLICY_HASH = "hash"
COLOR_POLICIES = (COLOR_POLICY_RANK, COLOR_POLICY_HASH)


def validate_color_policy(policy: str) -> None:
    if policy not in COLOR_POLICIES:
        raise ConfigurationError(f"unknown color policy {policy!r}, expected one of {COLOR_POLICIES}")


def sum_by_category(
    entries: Sequence[NormalizedTransaction],
    kind: str = EXPENSE,
) -> List[Tuple[str, Decimal]]:
    """
    Sum magnitudes of one kind per category (exact, case-sensitive match).

    Sorted by amount descending, ties broken by name ascending.
    """
    totals: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    for txn in entries:
        if txn.kind == kind:
            totals[txn.category] += txn.value
    return sorted(totals.items(), key=lambda item: (-item[1], item[0]))


def pick_color(name: str, position: int, policy: str = COLOR_POLICY_RANK) -> str:
    """
    Choose a palette color for a category.

    - rank: palette[position % len]. Colors follow rank, so a category
      changes color when its rank shifts between snapshots.
    - hash: palette[sha1(name) % len]. Stable for a given name regardless
      of rank; distinct categories may share a color.
    """
    if policy == COLOR_POLICY_HASH:
        digest = hashlib.sha1(name.encode("utf-8")).hexdigest()
        return CATEGORY_PALETTE[int(digest, 16) % len(CATEGORY_PALETTE)]
    return CATEGORY_PALETTE[position % len(CATEGORY_PALETTE)]


def aggregate_categories(
    entries: Sequence[NormalizedTransaction],
    color_policy: str = COLOR_POLICY_RANK,
) -> List[ExpenseCategory]:
    """Build the per-category expense breakdown, largest first"""
    validate_color_policy(color_policy)

    totals = sum_by_category(entries)
    grand_total = sum((amount for _, amount in totals), ZERO)

    categories = []
    for position, (name, amount) in enumerate(totals):
        share = amount / grand_total * 100 if grand_total > 0 else ZERO
        categories.append(
            ExpenseCategory(
                name=name,
                amount=amount,
                color=pick_color(name, position, color_policy),
                percentage=share.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP),
            )
        )
    return categories
