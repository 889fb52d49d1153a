"""Ledger normalizer - the single validation gate in front of every builder"""

import logging
import math
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from ledger_analytics.domain.exceptions import InvalidTransactionDataError
from ledger_analytics.domain.models import (
    DEFAULT_CATEGORY,
    TRANSACTION_KINDS,
    NormalizationResult,
    NormalizedTransaction,
    SkippedEntry,
    Transaction,
)
from ledger_analytics.utils.date_utils import parse_timestamp

logger = logging.getLogger(__name__)

# Mapping keys accepted for each field, first match wins
FIELD_ALIASES = {
    "id": ("id",),
    "kind": ("kind", "type"),
    "category": ("category",),
    "value": ("value", "amount"),
    "occurred_at": ("occurred_at", "occurredAt", "date"),
    "organization_id": ("organization_id", "organizationId"),
    "description": ("description",),
    "payment_method": ("payment_method", "paymentMethod"),
    "tags": ("tags",),
}


def _as_tags(tags: Any) -> Tuple[str, ...]:
    if isinstance(tags, (list, tuple)):
        return tuple(str(tag) for tag in tags)
    return ()


def _as_text(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _coerce_raw(raw: Any) -> Transaction:
    if isinstance(raw, Transaction):
        return raw
    if not isinstance(raw, Mapping):
        raise InvalidTransactionDataError("malformed_entry", f"unsupported entry type {type(raw).__name__}")

    def pick(name: str) -> Any:
        for key in FIELD_ALIASES[name]:
            if key in raw:
                return raw[key]
        return None

    return Transaction(
        id=pick("id"),
        kind=pick("kind"),
        category=pick("category"),
        value=pick("value"),
        occurred_at=pick("occurred_at"),
        organization_id=pick("organization_id"),
        description=pick("description"),
        payment_method=pick("payment_method"),
        tags=_as_tags(pick("tags")),
    )


def _parse_value(value: Any) -> Decimal:
    # bool is an int subclass; True must not become 1
    if isinstance(value, bool) or value is None:
        raise InvalidTransactionDataError("invalid_value", f"not a number: {value!r}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise InvalidTransactionDataError("invalid_value", f"not a number: {value!r}") from e

    if not amount.is_finite() or not math.isfinite(float(amount)):
        raise InvalidTransactionDataError("invalid_value", f"not a finite number: {value!r}")
    if amount <= 0:
        raise InvalidTransactionDataError("non_positive_value", f"value must be > 0, got {amount}")
    return amount


def normalize_transaction(
    raw: Any,
    default_category: str = DEFAULT_CATEGORY,
    organization_id: Optional[str] = None,
) -> NormalizedTransaction:
    """
    Validate and canonicalize a single raw entry.

    Only cosmetic canonicalization happens here: kind is trimmed and
    lower-cased, category is trimmed and a blank one replaced by
    default_category. The monetary meaning of an entry is never changed.

    Raises:
        InvalidTransactionDataError: With the skip reason code
    """
    txn = _coerce_raw(raw)

    # bool is an int subclass and never a usable id
    if isinstance(txn.id, bool) or not isinstance(txn.id, (int, str)):
        raise InvalidTransactionDataError("missing_id", f"entry has no usable id: {txn.id!r}")
    if isinstance(txn.id, str) and not txn.id.strip():
        raise InvalidTransactionDataError("missing_id", "entry has no id")

    if organization_id is not None and txn.organization_id not in (None, organization_id):
        raise InvalidTransactionDataError(
            "foreign_scope", f"entry belongs to organization {txn.organization_id}"
        )

    kind = txn.kind.strip().lower() if isinstance(txn.kind, str) else None
    if kind not in TRANSACTION_KINDS:
        raise InvalidTransactionDataError("unknown_kind", f"unknown kind {txn.kind!r}")

    value = _parse_value(txn.value)

    try:
        occurred_at = parse_timestamp(txn.occurred_at)
    except (ValueError, TypeError) as e:
        raise InvalidTransactionDataError("invalid_timestamp", str(e)) from e

    # Wall-clock time as recorded; month and weekday follow it
    if occurred_at.tzinfo is not None:
        occurred_at = occurred_at.replace(tzinfo=None)

    category = txn.category.strip() if isinstance(txn.category, str) else ""

    return NormalizedTransaction(
        id=txn.id,
        kind=kind,
        category=category or default_category,
        value=value,
        occurred_at=occurred_at,
        organization_id=txn.organization_id,
        description=_as_text(txn.description) or "",
        payment_method=_as_text(txn.payment_method),
        tags=_as_tags(txn.tags),
    )


def _entry_id(raw: Any) -> Any:
    if isinstance(raw, Transaction):
        return raw.id
    if isinstance(raw, Mapping):
        return raw.get("id")
    return None


def normalize_ledger(
    raw_entries: Iterable[Any],
    default_category: str = DEFAULT_CATEGORY,
    organization_id: Optional[str] = None,
) -> NormalizationResult:
    """
    Normalize a full ledger, dropping (not failing on) malformed entries.

    Accepted entries come back sorted by (occurred_at, str(id)) and skipped
    ones by (str(id), reason), so every downstream ordering is independent of
    the caller's input order.
    """
    entries: List[NormalizedTransaction] = []
    skipped: List[SkippedEntry] = []

    for raw in raw_entries:
        try:
            entries.append(normalize_transaction(raw, default_category, organization_id))
        except InvalidTransactionDataError as e:
            entry_id = _entry_id(raw)
            logger.debug("Skipping ledger entry", extra={"entry_id": entry_id, "reason": e.reason})
            skipped.append(SkippedEntry(id=entry_id, reason=e.reason, detail=e.detail))

    entries.sort(key=lambda t: (t.occurred_at, str(t.id)))
    skipped.sort(key=lambda s: (str(s.id), s.reason))
    return NormalizationResult(entries=tuple(entries), skipped=tuple(skipped))
