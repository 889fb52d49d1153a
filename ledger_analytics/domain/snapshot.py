"""Snapshot orchestrator - main entry point of the analytics engine"""

from types import MappingProxyType
from typing import Any, Iterable, Optional, Sequence

from ledger_analytics.domain.activity import daily_transactions, recent_transactions, validate_recent_limit
from ledger_analytics.domain.categories import aggregate_categories, validate_color_policy
from ledger_analytics.domain.exceptions import InvariantViolationError
from ledger_analytics.domain.heatmap import build_weekly_heatmap, validate_top_k
from ledger_analytics.domain.models import (
    ZERO,
    AnalyticsSnapshot,
    FinancialSummary,
    GoalDescriptor,
    NormalizedTransaction,
    SnapshotOptions,
)
from ledger_analytics.domain.money_flow import BALANCE_NODE_ID, build_money_flow, check_conservation, validate_subtypes
from ledger_analytics.domain.normalizer import normalize_ledger
from ledger_analytics.domain.periods import bucket_by_month, validate_window
from ledger_analytics.domain.summary import calculate_summary, validate_goal
from ledger_analytics.utils.date_utils import month_key, month_of


def validate_request(goal: Optional[GoalDescriptor], options: SnapshotOptions) -> None:
    """
    Reject caller contract violations before any computation.

    Raises:
        ConfigurationError: Or one of its subclasses
    """
    validate_goal(goal)
    validate_window(options.monthly_window)
    validate_top_k(options.heatmap_top_k)
    validate_recent_limit(options.recent_limit)
    validate_color_policy(options.color_policy)
    validate_subtypes(options.category_subtypes)


def reconcile(snapshot: AnalyticsSnapshot, entries: Sequence[NormalizedTransaction] = ()) -> None:
    """
    Cross-check view totals against the summary.

    - categories and heatmap cells sum to expenses
    - real income links into the balance node sum to income, real expense
      links out of it sum to expenses, and the balance node conserves flow
    - monthly buckets sum to income and expenses when the window reaches
      back to the earliest entry (needs the normalized entries)

    Raises:
        InvariantViolationError: If any projection disagrees with the summary
    """
    summary: FinancialSummary = snapshot.summary
    if summary.balance != summary.income - summary.expenses:
        raise InvariantViolationError("balance does not equal income - expenses")

    category_total = sum((c.amount for c in snapshot.categories), ZERO)
    if category_total != summary.expenses:
        raise InvariantViolationError(
            f"category total {category_total} != expenses {summary.expenses}"
        )

    heatmap_total = sum((cell for row in snapshot.heatmap.matrix for cell in row), ZERO)
    if heatmap_total != summary.expenses:
        raise InvariantViolationError(
            f"heatmap total {heatmap_total} != expenses {summary.expenses}"
        )

    _reconcile_money_flow(snapshot)
    _reconcile_monthly(snapshot, entries)


def _reconcile_money_flow(snapshot: AnalyticsSnapshot) -> None:
    flow = snapshot.money_flow
    check_conservation(flow)

    synthetic = {node.id for node in flow.nodes if node.is_synthetic}
    flow_income = sum(
        (l.value for l in flow.links if l.target_id == BALANCE_NODE_ID and l.source_id not in synthetic), ZERO
    )
    flow_expenses = sum(
        (l.value for l in flow.links if l.source_id == BALANCE_NODE_ID and l.target_id not in synthetic), ZERO
    )
    if flow_income != snapshot.summary.income:
        raise InvariantViolationError(
            f"money flow income {flow_income} != income {snapshot.summary.income}"
        )
    if flow_expenses != snapshot.summary.expenses:
        raise InvariantViolationError(
            f"money flow expenses {flow_expenses} != expenses {snapshot.summary.expenses}"
        )


def _reconcile_monthly(snapshot: AnalyticsSnapshot, entries: Sequence[NormalizedTransaction]) -> None:
    if not entries or not snapshot.monthly:
        return
    earliest = min(txn.occurred_at for txn in entries)
    if month_key(*month_of(earliest)) < snapshot.monthly[0].month_key:
        return

    monthly_income = sum((b.income for b in snapshot.monthly), ZERO)
    monthly_expenses = sum((b.expenses for b in snapshot.monthly), ZERO)
    if (monthly_income, monthly_expenses) != (snapshot.summary.income, snapshot.summary.expenses):
        raise InvariantViolationError(
            f"monthly totals {monthly_income}/{monthly_expenses} != "
            f"{snapshot.summary.income}/{snapshot.summary.expenses}"
        )


def compute_snapshot(
    raw_entries: Iterable[Any],
    goal: Optional[GoalDescriptor] = None,
    options: Optional[SnapshotOptions] = None,
) -> AnalyticsSnapshot:
    """
    Compute every dashboard view from one ledger.

    Flow:
    1. Validate goal and options (ConfigurationError, nothing computed)
    2. Normalize the ledger once; malformed entries go to `skipped`
    3. Run summary, monthly, category, money-flow, heatmap and activity
       builders over the same frozen entry tuple
    4. Reconcile cross-view totals and return one immutable snapshot

    Any builder failure propagates; a partial snapshot is never returned.
    """
    options = options or SnapshotOptions()
    validate_request(goal, options)

    normalized = normalize_ledger(
        raw_entries,
        default_category=options.default_category,
        organization_id=options.organization_id,
    )
    entries = normalized.entries

    categories = aggregate_categories(entries, options.color_policy)
    snapshot = AnalyticsSnapshot(
        summary=calculate_summary(entries, goal),
        monthly=tuple(bucket_by_month(entries, options.monthly_window)),
        categories=tuple(categories),
        money_flow=build_money_flow(entries, options.category_subtypes),
        heatmap=build_weekly_heatmap(
            entries,
            ranked_categories=[c.name for c in categories],
            top_k=options.heatmap_top_k,
            other_label=options.default_category,
        ),
        daily_transactions=MappingProxyType(daily_transactions(entries)),
        recent_transactions=tuple(recent_transactions(entries, options.recent_limit)),
        skipped=normalized.skipped,
    )

    reconcile(snapshot, entries)
    return snapshot
