"""Integration tests for API endpoints"""

import pytest
from fastapi.testclient import TestClient
from ledger_analytics.api.dependencies import get_settings
from ledger_analytics.api.main import create_app
from ledger_analytics.config import Settings


@pytest.fixture
def ledger_payload():
    """Scenario: one salary and two expenses in January 2025"""
    return {
        "organization_id": "org_1",
        "transactions": [
            {"id": "t1", "type": "income", "category": "Salário", "value": "1000", "date": "2025-01-05T09:00:00"},
            {"id": "t2", "type": "expense", "category": "Alimentação", "value": 200, "date": "2025-01-06T12:30:00"},
            {"id": "t3", "type": "expense", "category": "Transporte", "value": 100.0, "date": "2025-01-08T08:15:00"},
        ],
    }


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "ledger_snapshot_total" in response.text
    assert "ledger_skipped_entries_total" in response.text


def test_snapshot_endpoint(client: TestClient, ledger_payload):
    """Test POST /v1/analytics/snapshot returns every view"""
    response = client.post("/v1/analytics/snapshot", json=ledger_payload)

    assert response.status_code == 200
    data = response.json()
    assert data["summary"]["income"] == 1000
    assert data["summary"]["expenses"] == 300
    assert data["summary"]["balance"] == 700
    assert [c["name"] for c in data["categories"]] == ["Alimentação", "Transporte"]
    assert data["monthly"] == [{"month_key": "2025-01", "label": "Jan", "income": 1000, "expenses": 300}]
    assert data["heatmap"]["categories"] == ["Alimentação", "Transporte", "", "", "", "Outros"]
    assert all(len(row) == 6 for row in data["heatmap"]["matrix"])
    assert len(data["heatmap"]["matrix"]) == 7
    assert set(data["daily_transactions"]) == {
        "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"
    }
    assert [t["id"] for t in data["recent_transactions"]] == ["t3", "t2", "t1"]
    assert data["skipped"] == []


def test_snapshot_money_flow_balances(client: TestClient, ledger_payload):
    response = client.post("/v1/analytics/snapshot", json=ledger_payload)
    flow = response.json()["money_flow"]

    inbound = sum(link["value"] for link in flow["links"] if link["target_id"] == "balance")
    outbound = sum(link["value"] for link in flow["links"] if link["source_id"] == "balance")
    assert inbound == outbound == 1000
    assert {"id": "synthetic:unallocated", "name": "Não alocado", "column": "expense",
            "value": 700, "subtype": "unallocated"} in flow["nodes"]


def test_deficit_ledger(client: TestClient):
    """Test expenses above income yield a deficit node, not an error"""
    response = client.post(
        "/v1/analytics/snapshot",
        json={
            "transactions": [
                {"id": 1, "kind": "income", "category": "Salário", "value": 100, "occurred_at": "2025-01-05"},
                {"id": 2, "kind": "expense", "category": "Moradia", "value": 400, "occurred_at": "2025-01-06"},
            ]
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["summary"]["balance"] == -300
    deficit = next(n for n in data["money_flow"]["nodes"] if n["subtype"] == "deficit")
    assert deficit["value"] == 300


def test_malformed_entries_are_skipped(client: TestClient, ledger_payload):
    """Test bad rows come back in `skipped` instead of failing the request"""
    ledger_payload["transactions"] += [
        {"id": "bad_value", "type": "expense", "category": "Lazer", "value": "abc", "date": "2025-01-07"},
        {"id": "bad_date", "type": "expense", "category": "Lazer", "value": 10, "date": "yesterday"},
        {"id": "bad_kind", "type": "transfer", "category": "Lazer", "value": 10, "date": "2025-01-07"},
        {"type": "expense", "category": "Lazer", "value": 10, "date": "2025-01-07"},
        {"id": "other_org", "organization_id": "org_2", "type": "expense", "category": "Lazer",
         "value": 10, "date": "2025-01-07"},
    ]
    response = client.post("/v1/analytics/snapshot", json=ledger_payload)

    assert response.status_code == 200
    data = response.json()
    assert data["summary"]["expenses"] == 300
    assert {(s["id"], s["reason"]) for s in data["skipped"]} == {
        ("bad_value", "invalid_value"),
        ("bad_date", "invalid_timestamp"),
        ("bad_kind", "unknown_kind"),
        (None, "missing_id"),
        ("other_org", "foreign_scope"),
    }


def test_goal_progress(client: TestClient, ledger_payload):
    ledger_payload["goal"] = {"target_amount": 2500, "current_amount": 1000}
    response = client.post("/v1/analytics/snapshot", json=ledger_payload)

    summary = response.json()["summary"]
    assert summary["savings_goal"] == 2500
    assert summary["savings_progress"] == 40


def test_negative_goal_rejected(client: TestClient, ledger_payload):
    """Test caller contract violations map to 422"""
    ledger_payload["goal"] = {"target_amount": -10}
    response = client.post("/v1/analytics/snapshot", json=ledger_payload)

    assert response.status_code == 422
    assert "target_amount" in response.json()["detail"]


@pytest.mark.parametrize("field", ["monthly_window", "heatmap_top_k"])
def test_non_positive_window_rejected(client: TestClient, ledger_payload, field):
    ledger_payload[field] = 0
    response = client.post("/v1/analytics/snapshot", json=ledger_payload)

    assert response.status_code == 422


def test_reserved_subtype_rejected(client: TestClient, ledger_payload):
    ledger_payload["category_subtypes"] = {"Alimentação": "unallocated"}
    response = client.post("/v1/analytics/snapshot", json=ledger_payload)

    assert response.status_code == 422


def test_ledger_size_limit(ledger_payload):
    """Test ledgers above the configured cap are refused with 413"""
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: Settings(max_entries_per_request=2)
    client = TestClient(app)

    response = client.post("/v1/analytics/snapshot", json=ledger_payload)

    assert response.status_code == 413


def test_configured_engine_defaults_follow_settings(ledger_payload):
    """Test overriding settings also changes the engine defaults"""
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: Settings(heatmap_top_k=1, recent_transactions_limit=2)
    client = TestClient(app)

    data = client.post("/v1/analytics/snapshot", json=ledger_payload).json()

    assert data["heatmap"]["categories"] == ["Alimentação", "Outros"]
    assert len(data["recent_transactions"]) == 2


def test_request_id_propagation(client: TestClient, ledger_payload):
    """Test the caller's X-Request-ID is echoed, and one is minted otherwise"""
    response = client.post(
        "/v1/analytics/snapshot", json=ledger_payload, headers={"X-Request-ID": "req-123"}
    )
    assert response.headers["X-Request-ID"] == "req-123"

    response = client.get("/health")
    assert response.headers["X-Request-ID"]


def test_report_summary(client: TestClient, ledger_payload):
    response = client.post("/v1/reports/summary", json=ledger_payload)

    assert response.status_code == 200
    assert response.json()["balance"] == 700


def test_report_monthly(client: TestClient, ledger_payload):
    response = client.post("/v1/reports/monthly", json=ledger_payload)

    assert response.status_code == 200
    assert [m["label"] for m in response.json()] == ["Jan"]


def test_report_categories(client: TestClient, ledger_payload):
    response = client.post("/v1/reports/categories", json=ledger_payload)

    categories = response.json()
    assert [c["percentage"] for c in categories] == [66.67, 33.33]
    assert categories[0]["color"] == "#1E40AF"


def test_report_money_flow(client: TestClient, ledger_payload):
    response = client.post("/v1/reports/money-flow", json=ledger_payload)

    assert response.status_code == 200
    assert [n["id"] for n in response.json()["nodes"]][:2] == ["income:Salário", "balance"]


def test_report_weekly_heatmap(client: TestClient, ledger_payload):
    response = client.post("/v1/reports/weekly-heatmap", json=ledger_payload)

    heatmap = response.json()
    assert heatmap["weekdays"][0] == "Segunda"
    # Alimentação on Monday, Transporte on Wednesday
    assert heatmap["matrix"][0][0] == 200
    assert heatmap["matrix"][2][1] == 100


def test_report_daily_transactions(client: TestClient, ledger_payload):
    response = client.post("/v1/reports/daily-transactions", json=ledger_payload)

    daily = response.json()
    assert daily["monday"] == [{"category": "Alimentação", "amount": 200, "description": ""}]
    assert daily["sunday"] == []


def test_reports_share_error_mapping(client: TestClient, ledger_payload):
    ledger_payload["monthly_window"] = -1
    response = client.post("/v1/reports/monthly", json=ledger_payload)

    assert response.status_code == 422


def test_goal_records_folded_into_summary(client: TestClient, ledger_payload):
    """Test goal records are summed when no explicit goal is sent"""
    ledger_payload["goals"] = [
        {"id": "g1", "name": "Reserva de emergência", "target_amount": 3000, "current_amount": 1500},
        {"id": "g2", "name": "Viagem", "target_amount": 1000, "current_amount": 500},
    ]
    response = client.post("/v1/analytics/snapshot", json=ledger_payload)

    summary = response.json()["summary"]
    assert summary["savings_goal"] == 4000
    assert summary["savings_progress"] == 50


def test_report_goals(client: TestClient):
    response = client.post(
        "/v1/reports/goals",
        json={
            "today": "2025-01-01",
            "goals": [
                {"id": "g1", "name": "Viagem", "target_amount": 1200, "current_amount": 300,
                 "target_date": "2025-03-02"},
                {"id": "g2", "name": "Notebook", "target_amount": 500, "current_amount": 600},
            ],
        },
    )

    assert response.status_code == 200
    data = response.json()
    trip, laptop = data["goals"]
    assert trip["progress"] == 25
    assert trip["days_remaining"] == 60
    assert trip["monthly_required"] == 450
    assert laptop["progress"] == 100
    assert laptop["days_remaining"] is None
    assert data["combined_target"] == 1700
    assert data["combined_current"] == 900


def test_report_goals_rejects_negative_amounts(client: TestClient):
    response = client.post(
        "/v1/reports/goals",
        json={"goals": [{"id": "g1", "name": "Viagem", "target_amount": -5}]},
    )

    assert response.status_code == 422


@pytest.mark.parametrize(
    "bad_row,reason",
    [
        ({"id": "t9", "type": "expense", "category": "Lazer", "value": 10, "date": "2025-01-07", "tags": None}, None),
        ({"id": "t9", "type": "expense", "category": "Lazer", "value": 10, "date": "2025-01-07", "description": 42}, None),
        ({"id": 1.5, "type": "expense", "category": "Lazer", "value": 10, "date": "2025-01-07"}, "missing_id"),
        ({"id": True, "type": "expense", "category": "Lazer", "value": 10, "date": "2025-01-07"}, "missing_id"),
        ("not-an-object", "malformed_entry"),
        (17, "malformed_entry"),
        ({"id": "huge", "type": "expense", "category": "Lazer", "value": "1e400", "date": "2025-01-07"}, "invalid_value"),
    ],
)
def test_odd_rows_never_reject_the_ledger(client: TestClient, ledger_payload, bad_row, reason):
    """Test one odd row is either accepted with coerced fields or skipped, never a 422"""
    ledger_payload["transactions"].append(bad_row)
    response = client.post("/v1/analytics/snapshot", json=ledger_payload)

    assert response.status_code == 200
    data = response.json()
    if reason is None:
        assert data["skipped"] == []
        assert data["summary"]["expenses"] == 310
    else:
        assert [s["reason"] for s in data["skipped"]] == [reason]
        assert data["summary"]["expenses"] == 300
    assert data["summary"]["balance"] is not None


def test_numeric_description_is_coerced_to_text(client: TestClient, ledger_payload):
    ledger_payload["transactions"].append(
        {"id": "t9", "type": "expense", "category": "Lazer", "value": 10, "date": "2025-01-07", "description": 42}
    )
    response = client.post("/v1/reports/daily-transactions", json=ledger_payload)

    assert response.json()["tuesday"] == [{"category": "Lazer", "amount": 10, "description": "42"}]
