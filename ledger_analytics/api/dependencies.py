"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request

from ledger_analytics.config import Settings, settings
from ledger_analytics.domain.models import SnapshotOptions


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_settings() -> Settings:
    """Provide application settings"""
    return settings


def get_snapshot_options(app_settings: Settings = Depends(get_settings)) -> SnapshotOptions:
    """Engine defaults from configuration; requests may override some of them"""
    return SnapshotOptions(
        monthly_window=app_settings.monthly_window,
        heatmap_top_k=app_settings.heatmap_top_k,
        recent_limit=app_settings.recent_transactions_limit,
        default_category=app_settings.default_category,
        color_policy=app_settings.category_color_policy,
    )
