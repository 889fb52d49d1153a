"""POST /v1/analytics/snapshot - Full analytics snapshot for a ledger"""

import dataclasses
import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from ledger_analytics.api.dependencies import get_request_id, get_settings, get_snapshot_options
from ledger_analytics.api.v1.schemas import SnapshotRequest, SnapshotResponse
from ledger_analytics.config import Settings
from ledger_analytics.domain.exceptions import ConfigurationError, InvariantViolationError
from ledger_analytics.domain.goals import combine_goals
from ledger_analytics.domain.models import AnalyticsSnapshot, GoalDescriptor, SnapshotOptions
from ledger_analytics.domain.snapshot import compute_snapshot
from ledger_analytics.infrastructure.observability.logging import log_skipped_entries, log_snapshot
from ledger_analytics.infrastructure.observability.metrics import record_snapshot, record_snapshot_failure

router = APIRouter()


def resolve_options(request_body: SnapshotRequest, defaults: SnapshotOptions) -> SnapshotOptions:
    """Layer per-request overrides on top of the configured defaults"""
    overrides = {
        "organization_id": request_body.organization_id,
        "category_subtypes": dict(request_body.category_subtypes),
    }
    if request_body.monthly_window is not None:
        overrides["monthly_window"] = request_body.monthly_window
    if request_body.heatmap_top_k is not None:
        overrides["heatmap_top_k"] = request_body.heatmap_top_k
    return dataclasses.replace(defaults, **overrides)


def resolve_goal(request_body: SnapshotRequest) -> Optional[GoalDescriptor]:
    """An explicit goal wins; otherwise goal records are folded into one"""
    if request_body.goal is not None:
        return request_body.goal.to_domain()
    return combine_goals(g.to_domain(request_body.organization_id) for g in request_body.goals)


def run_snapshot(
    request_body: SnapshotRequest,
    request_id: str,
    options: SnapshotOptions,
    app_settings: Settings,
) -> AnalyticsSnapshot:
    """
    Compute a snapshot for one request, with metrics, logs and error mapping.

    Errors:
    - ledger larger than max_entries_per_request -> 413
    - invalid goal / window / subtype -> 422
    - internal invariant violation or anything unexpected -> 500
    """
    entry_count = len(request_body.transactions)
    if entry_count > app_settings.max_entries_per_request:
        record_snapshot_failure(rejected=True)
        raise HTTPException(
            status_code=413,
            detail=f"Ledger too large: {entry_count} entries, limit {app_settings.max_entries_per_request}",
        )

    start_time = time.time()
    try:
        snapshot = compute_snapshot(
            request_body.ledger_entries(),
            goal=resolve_goal(request_body),
            options=resolve_options(request_body, options),
        )

    except ConfigurationError as e:
        record_snapshot_failure(rejected=True)
        logging.warning(f"Rejected snapshot request: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except InvariantViolationError as e:
        record_snapshot_failure(rejected=False)
        logging.error(f"Snapshot invariant violated: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    except Exception as e:
        record_snapshot_failure(rejected=False)
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    record_snapshot(entry_count, snapshot.skipped)
    log_skipped_entries(request_id, snapshot.skipped)
    log_snapshot(request_id, request_body.organization_id, entry_count, len(snapshot.skipped), duration_ms)

    return snapshot


@router.post("/analytics/snapshot", response_model=SnapshotResponse)
def create_snapshot(
    request_body: SnapshotRequest,
    request: Request,
    options: SnapshotOptions = Depends(get_snapshot_options),
    app_settings: Settings = Depends(get_settings),
):
    """
    Compute every dashboard view from the supplied ledger.

    Malformed entries are dropped and listed in `skipped`; the views are
    always computed together so their totals agree.
    """
    snapshot = run_snapshot(request_body, get_request_id(request), options, app_settings)
    return SnapshotResponse.model_validate(snapshot)
