"""Structured JSON logging for production observability"""

import logging
import sys
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence

from pythonjsonlogger import jsonlogger

from ledger_analytics.config import settings
from ledger_analytics.domain.models import SkippedEntry


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_snapshot(
    request_id: str,
    organization_id: Optional[str],
    entry_count: int,
    skipped_count: int,
    duration_ms: float,
) -> None:
    """Log structured snapshot outcome for analysis"""
    logging.info(
        "Snapshot computed",
        extra={
            "request_id": request_id,
            "organization_id": organization_id,
            "step": "snapshot_complete",
            "entry_count": entry_count,
            "skipped_count": skipped_count,
            "duration_ms": duration_ms,
        },
    )


def log_skipped_entries(request_id: str, skipped: Sequence[SkippedEntry]) -> None:
    """Summarise dropped ledger entries by reason"""
    if not skipped:
        return
    logging.warning(
        "Ledger entries skipped",
        extra={
            "request_id": request_id,
            "step": "normalize",
            "skipped_count": len(skipped),
            "skipped_by_reason": dict(Counter(s.reason for s in skipped)),
        },
    )
