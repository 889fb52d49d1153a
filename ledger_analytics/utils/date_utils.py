"""Calendar helpers for month bucketing and weekday indexing"""

from datetime import date, datetime, time
from typing import Any, List, Tuple

MONTH_LABELS = ("Jan", "Fev", "Mar", "Abr", "Mai", "Jun", "Jul", "Ago", "Set", "Out", "Nov", "Dez")


def parse_timestamp(value: Any) -> datetime:
    """
    Coerce a ledger timestamp to a datetime.

    Accepts datetime, date (taken as local midnight) or an ISO-8601 string.

    Raises:
        ValueError: If the value cannot be interpreted as a timestamp
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str) and value.strip():
        return datetime.fromisoformat(value.strip())
    raise ValueError(f"unparseable timestamp: {value!r}")


def month_of(moment: datetime) -> Tuple[int, int]:
    return moment.year, moment.month


def month_key(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def month_label(month: int) -> str:
    return MONTH_LABELS[month - 1]


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    """Move (year, month) by delta calendar months"""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def generate_month_range(start: Tuple[int, int], end: Tuple[int, int]) -> List[Tuple[int, int]]:
    """Generate list of (year, month) pairs from start to end (inclusive)"""
    months = (end[0] - start[0]) * 12 + (end[1] - start[1]) + 1
    return [shift_month(start[0], start[1], i) for i in range(months)]


def weekday_index(moment: datetime) -> int:
    """Local weekday, Monday = 0 ... Sunday = 6"""
    return moment.weekday()
