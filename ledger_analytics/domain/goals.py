"""Savings goal helpers for records coming from the goal store"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from ledger_analytics.domain.models import ZERO, Goal, GoalDescriptor
from ledger_analytics.domain.summary import CENT, progress_percentage, validate_goal

DAYS_PER_MONTH = 30


def combine_goals(goals: Iterable[Goal]) -> Optional[GoalDescriptor]:
    """
    Fold every goal of an organization into one descriptor for the summary.

    Returns None when there are no goals, so the summary omits its goal fields.

    Raises:
        InvalidGoalError: If any goal carries a negative amount
    """
    goals = list(goals)
    if not goals:
        return None

    for goal in goals:
        validate_goal(GoalDescriptor(goal.target_amount, goal.current_amount))

    return GoalDescriptor(
        target_amount=sum((g.target_amount for g in goals), ZERO),
        current_amount=sum((g.current_amount for g in goals), ZERO),
    )


def calculate_progress(goal: Goal) -> Decimal:
    """Progress towards the goal in percent (0 for a zero target)"""
    return progress_percentage(goal.current_amount, goal.target_amount)


def days_remaining(goal: Goal, today: Optional[date] = None) -> Optional[int]:
    """Days until target_date; negative once overdue, None without a date"""
    if goal.target_date is None:
        return None
    today = today or date.today()
    return (goal.target_date - today).days


def monthly_required_amount(goal: Goal, today: Optional[date] = None) -> Optional[Decimal]:
    """
    Amount to set aside per month to reach the goal by its target date.

    Months are counted as 30-day periods. Returns None without a target
    date or once the date has passed, and 0 when the goal is already met.
    """
    remaining_days = days_remaining(goal, today)
    if remaining_days is None or remaining_days <= 0:
        return None

    remaining = goal.target_amount - goal.current_amount
    if remaining <= 0:
        return ZERO

    months_remaining = Decimal(remaining_days) / DAYS_PER_MONTH
    return (remaining / months_remaining).quantize(CENT, rounding=ROUND_HALF_UP)
