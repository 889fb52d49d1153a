"""Prometheus metrics for monitoring snapshot volume, ledger sizes and data quality"""

from typing import Sequence

from prometheus_client import Counter, Histogram

from ledger_analytics.domain.models import SkippedEntry

# Snapshot metrics
snapshot_counter = Counter(
    "ledger_snapshot_total",
    "Total analytics snapshots requested",
    ["outcome"],  # computed | rejected | failed
)

skipped_entries_counter = Counter(
    "ledger_skipped_entries_total",
    "Ledger entries dropped by the normalizer",
    ["reason"],
)

snapshot_entries_histogram = Histogram(
    "ledger_snapshot_entries",
    "Ledger entries per snapshot request",
    buckets=[0, 10, 100, 1_000, 10_000, 50_000],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_snapshot(entry_count: int, skipped: Sequence[SkippedEntry]) -> None:
    """Record a computed snapshot with its ledger size and skip reasons"""
    snapshot_counter.labels(outcome="computed").inc()
    snapshot_entries_histogram.observe(entry_count)

    for entry in skipped:
        skipped_entries_counter.labels(reason=entry.reason).inc()


def record_snapshot_failure(rejected: bool) -> None:
    """rejected = caller contract violation; otherwise an internal failure"""
    snapshot_counter.labels(outcome="rejected" if rejected else "failed").inc()
