"""Pytest fixtures for testing"""

import itertools
import pytest
from datetime import datetime
from typing import Callable, List
from fastapi.testclient import TestClient
from ledger_analytics.api.main import create_app
from ledger_analytics.domain.models import Transaction
from ledger_analytics.domain.normalizer import normalize_ledger

# 2025-01-06 is a Monday
MONDAY = datetime(2025, 1, 6, 12, 0)


@pytest.fixture
def client() -> TestClient:
    """Create FastAPI test client"""
    app = create_app()
    return TestClient(app)


@pytest.fixture
def make_transaction() -> Callable[..., Transaction]:
    """Factory for raw ledger entries with sequential ids"""
    ids = itertools.count(1)

    def _make(
        kind: str = "expense",
        category: str = "Alimentação",
        value="100",
        occurred_at=MONDAY,
        **extra,
    ) -> Transaction:
        txn_id = extra.pop("id", f"tx_{next(ids)}")
        return Transaction(
            id=txn_id,
            kind=kind,
            category=category,
            value=value,
            occurred_at=occurred_at,
            **extra,
        )

    return _make


@pytest.fixture
def scenario_a(make_transaction) -> List[Transaction]:
    """One salary and two expenses in January 2025"""
    return [
        make_transaction("income", "Salário", "1000", datetime(2025, 1, 5, 9, 0)),
        make_transaction("expense", "Alimentação", "200", datetime(2025, 1, 6, 12, 30)),
        make_transaction("expense", "Transporte", "100", datetime(2025, 1, 8, 8, 15)),
    ]


@pytest.fixture
def mixed_ledger(make_transaction) -> List[Transaction]:
    """Several months, both kinds, a spread of categories and weekdays"""
    ledger = []
    for month in range(1, 5):
        ledger.append(make_transaction("income", "Salário", "4500.00", datetime(2025, month, 5, 9, 0)))
        ledger.append(make_transaction("income", "Freelance", "730.25", datetime(2025, month, 20, 18, 0)))
        ledger.append(make_transaction("expense", "Moradia", "2100.00", datetime(2025, month, 10, 10, 0)))
        ledger.append(make_transaction("expense", "Alimentação", "127.50", datetime(2025, month, 11, 19, 0)))
        ledger.append(make_transaction("expense", "Transporte", "80.10", datetime(2025, month, 12, 7, 45)))
        ledger.append(make_transaction("expense", "Lazer", "45.90", datetime(2025, month, 14, 21, 0)))
    ledger.append(make_transaction("expense", "Saúde", "680.00", datetime(2025, 2, 3, 15, 0)))
    ledger.append(make_transaction("expense", "", "33.33", datetime(2025, 3, 16, 11, 0)))
    return ledger


@pytest.fixture
def normalized():
    """Normalize raw entries the way the orchestrator does"""

    def _normalize(raw):
        return normalize_ledger(raw).entries

    return _normalize
