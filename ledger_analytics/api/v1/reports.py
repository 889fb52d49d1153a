"""POST /v1/reports/* - Single dashboard views cut from a full snapshot, plus goal progress"""

from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException, Request

from ledger_analytics.api.dependencies import get_request_id, get_settings, get_snapshot_options
from ledger_analytics.api.v1.schemas import (
    CategorySchema,
    DailyTransactionSchema,
    GoalProgressSchema,
    GoalsRequest,
    GoalsResponse,
    HeatmapSchema,
    MoneyFlowSchema,
    MonthlySchema,
    SnapshotRequest,
    SummarySchema,
)
from ledger_analytics.api.v1.snapshot import run_snapshot
from ledger_analytics.config import Settings
from ledger_analytics.domain.exceptions import InvalidGoalError
from ledger_analytics.domain.goals import calculate_progress, combine_goals, days_remaining, monthly_required_amount
from ledger_analytics.domain.models import SnapshotOptions
from ledger_analytics.domain.summary import progress_percentage

router = APIRouter()


@router.post("/reports/summary", response_model=SummarySchema)
def get_summary(
    request_body: SnapshotRequest,
    request: Request,
    options: SnapshotOptions = Depends(get_snapshot_options),
    app_settings: Settings = Depends(get_settings),
):
    """Balance, income, expenses and savings goal progress"""
    snapshot = run_snapshot(request_body, get_request_id(request), options, app_settings)
    return SummarySchema.model_validate(snapshot.summary)


@router.post("/reports/monthly", response_model=List[MonthlySchema])
def get_monthly(
    request_body: SnapshotRequest,
    request: Request,
    options: SnapshotOptions = Depends(get_snapshot_options),
    app_settings: Settings = Depends(get_settings),
):
    """Monthly income/expense series, oldest month first"""
    snapshot = run_snapshot(request_body, get_request_id(request), options, app_settings)
    return [MonthlySchema.model_validate(bucket) for bucket in snapshot.monthly]


@router.post("/reports/categories", response_model=List[CategorySchema])
def get_categories(
    request_body: SnapshotRequest,
    request: Request,
    options: SnapshotOptions = Depends(get_snapshot_options),
    app_settings: Settings = Depends(get_settings),
):
    """Expense breakdown by category, largest first"""
    snapshot = run_snapshot(request_body, get_request_id(request), options, app_settings)
    return [CategorySchema.model_validate(category) for category in snapshot.categories]


@router.post("/reports/money-flow", response_model=MoneyFlowSchema)
def get_money_flow(
    request_body: SnapshotRequest,
    request: Request,
    options: SnapshotOptions = Depends(get_snapshot_options),
    app_settings: Settings = Depends(get_settings),
):
    snapshot = run_snapshot(request_body, get_request_id(request), options, app_settings)
    return MoneyFlowSchema.model_validate(snapshot.money_flow)


@router.post("/reports/weekly-heatmap", response_model=HeatmapSchema)
def get_weekly_heatmap(
    request_body: SnapshotRequest,
    request: Request,
    options: SnapshotOptions = Depends(get_snapshot_options),
    app_settings: Settings = Depends(get_settings),
):
    snapshot = run_snapshot(request_body, get_request_id(request), options, app_settings)
    return HeatmapSchema.model_validate(snapshot.heatmap)


@router.post("/reports/daily-transactions", response_model=Dict[str, List[DailyTransactionSchema]])
def get_daily_transactions(
    request_body: SnapshotRequest,
    request: Request,
    options: SnapshotOptions = Depends(get_snapshot_options),
    app_settings: Settings = Depends(get_settings),
):
    """Expense entries grouped by weekday (monday ... sunday)"""
    snapshot = run_snapshot(request_body, get_request_id(request), options, app_settings)
    return {
        day: [DailyTransactionSchema.model_validate(item) for item in items]
        for day, items in snapshot.daily_transactions.items()
    }


@router.post("/reports/goals", response_model=GoalsResponse)
def get_goals(request_body: GoalsRequest):
    """
    Progress for each goal record, plus the combined goal.

    Needs no ledger: days remaining and the monthly amount still required
    are counted from `today` (default: the server's date).
    """
    goals = [g.to_domain(request_body.organization_id) for g in request_body.goals]
    try:
        combined = combine_goals(goals)
    except InvalidGoalError as e:
        raise HTTPException(status_code=422, detail=str(e))

    combined_progress = (
        progress_percentage(combined.current_amount, combined.target_amount) if combined else None
    )
    return GoalsResponse(
        goals=[
            GoalProgressSchema(
                id=goal.id,
                name=goal.name,
                target_amount=goal.target_amount,
                current_amount=goal.current_amount,
                progress=calculate_progress(goal),
                days_remaining=days_remaining(goal, request_body.today),
                monthly_required=monthly_required_amount(goal, request_body.today),
            )
            for goal in goals
        ],
        combined_target=combined.target_amount if combined else None,
        combined_current=combined.current_amount if combined else None,
        combined_progress=combined_progress,
    )
