"""Summary calculator - top-line totals and savings goal progress"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence

from ledger_analytics.domain.exceptions import InvalidGoalError
from ledger_analytics.domain.models import ZERO, FinancialSummary, GoalDescriptor, NormalizedTransaction

HUNDRED = Decimal("100")
CENT = Decimal("0.01")


def validate_goal(goal: Optional[GoalDescriptor]) -> None:
    """
    Reject goals that break the caller contract.

    Raises:
        InvalidGoalError: If target_amount or current_amount is negative
    """
    if goal is None:
        return
    if goal.target_amount < 0:
        raise InvalidGoalError(f"target_amount must be >= 0, got {goal.target_amount}")
    if goal.current_amount < 0:
        raise InvalidGoalError(f"current_amount must be >= 0, got {goal.current_amount}")


def progress_percentage(current_amount: Decimal, target_amount: Decimal) -> Decimal:
    """current / target as a percentage, clamped to [0, 100] and rounded to cents"""
    if target_amount <= 0:
        return ZERO
    progress = current_amount / target_amount * HUNDRED
    progress = max(ZERO, min(progress, HUNDRED))
    return progress.quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_summary(
    entries: Sequence[NormalizedTransaction],
    goal: Optional[GoalDescriptor] = None,
) -> FinancialSummary:
    """
    Compute balance, income and expenses, merging the savings goal.

    Goal fields are left as None (not zeroed) when there is no goal or the
    target is zero, so "no goal" stays distinguishable from "goal of zero".
    """
    validate_goal(goal)

    income = sum((t.value for t in entries if t.is_income), ZERO)
    expenses = sum((t.value for t in entries if t.is_expense), ZERO)

    savings_goal = None
    savings_progress = None
    if goal is not None and goal.target_amount > 0:
        savings_goal = goal.target_amount
        savings_progress = progress_percentage(goal.current_amount, goal.target_amount)

    return FinancialSummary(
        balance=income - expenses,
        income=income,
        expenses=expenses,
        savings_goal=savings_goal,
        savings_progress=savings_progress,
    )
