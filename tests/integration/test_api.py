"""Integration tests for API endpoints"""

import json
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

pytestmark = pytest.mark.integration


@pytest.fixture
def loan_payloads():
    """Loan book as posted by the dashboard"""
    return [
        {
            "loan_id": 1,
            "principal": 100000,
            "annual_rate": 0.12,
            "start_date": "2026-05-01",
            "repayment_date": "2026-11-10",
            "expiry_date": "2026-11-10",
            "project_id": 7,
            "project_title": "Harbour View",
            "total_interest_paid": 5000,
            "payment_count": 5,
            "last_payment_date": "2026-10-05",
        },
        {
            "loan_id": 2,
            "principal": 50000,
            "annual_rate": 0.096,
            "start_date": "2026-01-15",
            "repayment_date": "2027-06-14",
            "project_id": 8,
            "project_title": "Riverside Lots",
            "total_interest_paid": 4000,
            "total_net_paid": 3400,
            "total_tax_paid": 400,
            "total_fees_paid": 200,
            "last_payment_date": "2026-10-10",
        },
        {
            "loan_id": 9,
            "principal": 20000,
            "annual_rate": 0.12,
            "start_date": "2026-03-01",
            "repayment_date": "2026-09-01",
            "project_id": 59,
            "project_title": "Special Works",
        },
        {
            "loan_id": 10,
            "principal": 5000,
            "annual_rate": 0.1,
            "start_date": "2026-01-01",
            "repayment_date": "2027-01-01",
            "status": "closed",
        },
    ]


@pytest.fixture
def funding_payloads():
    return [
        {
            "funding_id": 101,
            "loan_id": 2,
            "investor_id": 11,
            "invested_amount": 40000,
            "annual_rate": 0.09,
            "start_date": "2026-01-15",
            "end_date": "2027-06-14",
            "investor_name": "Alice Smith",
            "last_payment_date": "2026-09-25",
        },
        {
            "funding_id": 102,
            "loan_id": 2,
            "investor_id": 12,
            "invested_amount": 10000,
            "annual_rate": 0.12,
            "start_date": "2026-01-15",
            "end_date": "2027-06-14",
            "investor_name": "GOODLAND Capital Ltd",
        },
        {
            "funding_id": 103,
            "loan_id": 2,
            "investor_id": 14,
            "invested_amount": 5000,
            "annual_rate": 0,
            "start_date": "2026-01-15",
            "end_date": "2027-06-14",
        },
    ]


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "loanbook_cashflow_projections_total" in response.text


def test_request_id_is_echoed(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


def test_loans_endpoint(client: TestClient, loan_payloads):
    """Test POST /v1/loans restricted to the active book"""
    response = client.post("/v1/loans", json={"loans": loan_payloads})

    assert response.status_code == 200
    data = response.json()
    assert data["as_of"] == "2026-10-18"
    assert data["total"] == 3
    assert [loan["loan_id"] for loan in data["data"]] == [9, 1, 2]
    assert [loan["loan_status"] for loan in data["data"]] == ["overdue", "due_this_month", "active"]

    maturing = data["data"][1]
    assert maturing["expected_total_interest"] == 6300.0
    assert maturing["contract_full_months"] == 6
    assert maturing["contract_remaining_days"] == 9
    assert maturing["interest_status"] == "partial"
    assert maturing["payment_completion"] == 79

    assert data["summary"]["special_projects"]["overdue"] == 1
    assert data["summary"]["loan_status_counts"]["overdue"] == 1


def test_loans_endpoint_whole_book(client: TestClient, loan_payloads):
    response = client.post("/v1/loans", params={"active_only": False}, json={"loans": loan_payloads})

    assert response.status_code == 200
    assert response.json()["total"] == 4


def test_cashflow_endpoint(client: TestClient, loan_payloads, funding_payloads):
    """Test POST /v1/cashflow/monthly"""
    response = client.post(
        "/v1/cashflow/monthly",
        params={"months": 3},
        json={"loans": loan_payloads, "fundings": funding_payloads},
    )

    assert response.status_code == 200
    data = response.json()
    assert [month["month"] for month in data["data"]] == ["2026-10", "2026-11", "2026-12"]

    november = data["data"][1]
    assert november["month_name"] == "November 2026"
    # 333.33 prorated from loan 1 plus 340 net from loan 2
    assert november["total_interest_receivable"] == 673.33
    assert november["total_principal_due"] == 100000
    assert november["total_investor_payouts"] == 300
    assert november["excluded_investor_payouts"] == 100
    # Zero-rate funding is dropped
    assert len(november["investor_payouts"]) == 2

    assert data["summary"]["total_investors"] == 2
    assert data["summary"]["payment_analysis"]["total_loans"] == 3


def test_cashflow_endpoint_rejects_empty_horizon(client: TestClient, loan_payloads):
    response = client.post("/v1/cashflow/monthly", params={"months": 0}, json={"loans": loan_payloads})
    assert response.status_code == 422


def test_borrower_reminders_endpoint(client: TestClient, loan_payloads):
    """Test POST /v1/reminders"""
    response = client.post("/v1/reminders", json={"loans": loan_payloads})

    assert response.status_code == 200
    data = response.json()
    assert [r["loan_id"] for r in data["data"]] == [9]
    assert data["data"][0]["status"] == "overdue"
    assert data["summary"]["special_projects"] == 1


def test_investor_reminders_endpoint(client: TestClient, loan_payloads, funding_payloads):
    """Test POST /v1/reminders/investors with a paid flag"""
    response = client.post(
        "/v1/reminders/investors",
        json={
            "loans": loan_payloads,
            "fundings": funding_payloads,
            "flags": [
                {
                    "reminder_key": "2|11|2026-10-24",
                    "is_paid": True,
                    "marked_paid_at": "2026-10-15T14:00:00",
                }
            ],
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert len(data["data"]) == 1
    payments = data["data"][0]["payments"]
    alice = next(p for p in payments if p["investor_id"] == 11)
    assert alice["scheduled_date"] == "2026-10-24"
    assert alice["payment_amount"] == 300
    assert alice["is_paid"] is True
    assert data["summary"]["paid_payments"] == 1


def test_investor_reminders_rejects_malformed_flag(client: TestClient, loan_payloads):
    response = client.post(
        "/v1/reminders/investors",
        json={"loans": loan_payloads, "flags": [{"reminder_key": "2|11", "is_paid": True}]},
    )

    assert response.status_code == 422
    assert "loan|investor|date" in response.json()["detail"]


def _post_raw(client: TestClient, url: str, body: dict):
    """Post a body that may hold Infinity or NaN literals"""
    return client.post(url, content=json.dumps(body), headers={"Content-Type": "application/json"})


@pytest.mark.parametrize("field, value", [("principal", float("inf")), ("annual_rate", float("nan"))])
def test_loans_endpoint_rejects_non_finite_amounts(client: TestClient, loan_payloads, field, value):
    loan_payloads[0][field] = value

    response = _post_raw(client, "/v1/loans", {"loans": loan_payloads})

    assert response.status_code == 422


def test_cashflow_endpoint_rejects_non_finite_funding(client: TestClient, loan_payloads, funding_payloads):
    funding_payloads[0]["invested_amount"] = float("-inf")

    response = _post_raw(
        client, "/v1/cashflow/monthly", {"loans": loan_payloads, "fundings": funding_payloads}
    )

    assert response.status_code == 422


def test_loans_endpoint_hides_engine_failures(client: TestClient, loan_payloads):
    with patch("loanbook.api.v1.loans.evaluate_book", side_effect=RuntimeError("boom")):
        response = client.post("/v1/loans", json={"loans": loan_payloads})

    assert response.status_code == 500
    assert response.json()["detail"] == "Internal server error"
