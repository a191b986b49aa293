"""Pytest fixtures for testing"""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from loanbook.api.dependencies import get_book_policy, get_today
from loanbook.api.main import create_app
from loanbook.domain.models import BookPolicy, InvestorFunding, Loan

# Fixed as-of date for every engine computation under test
AS_OF = date(2026, 10, 18)


@pytest.fixture
def today() -> date:
    return AS_OF


@pytest.fixture
def policy() -> BookPolicy:
    """Special projects 51/55/59; payouts to Goodland are intercompany"""
    return BookPolicy(
        special_project_ids=frozenset({51, 55, 59}),
        operating_company_name="goodland",
    )


@pytest.fixture
def client(today: date, policy: BookPolicy) -> TestClient:
    """Create FastAPI test client pinned to the fixed as-of date"""
    app = create_app()
    app.dependency_overrides[get_today] = lambda: today
    app.dependency_overrides[get_book_policy] = lambda: policy
    return TestClient(app)


@pytest.fixture
def maturing_loan() -> Loan:
    """Loan repaying on 10 November 2026 with its last interest payment on 5 October"""
    return Loan(
        loan_id=1,
        principal=100_000,
        annual_rate=0.12,
        start_date=date(2026, 5, 1),
        repayment_date=date(2026, 11, 10),
        expiry_date=date(2026, 11, 10),
        project_id=7,
        project_title="Harbour View",
        total_interest_paid=5_000,
        payment_count=5,
        last_payment_date=date(2026, 10, 5),
    )


@pytest.fixture
def running_loan() -> Loan:
    """Mid-term loan with taxes and fees withheld from its interest"""
    return Loan(
        loan_id=2,
        principal=50_000,
        annual_rate=0.096,
        start_date=date(2026, 1, 15),
        repayment_date=date(2027, 6, 14),
        expiry_date=date(2027, 6, 14),
        project_id=8,
        project_title="Riverside Lots",
        total_interest_paid=4_000,
        total_net_paid=3_400,
        total_tax_paid=400,
        total_fees_paid=200,
        payment_count=9,
        last_payment_date=date(2026, 10, 10),
    )


@pytest.fixture
def external_funding() -> InvestorFunding:
    return InvestorFunding(
        funding_id=101,
        loan_id=2,
        investor_id=11,
        invested_amount=40_000,
        annual_rate=0.09,
        start_date=date(2026, 1, 15),
        end_date=date(2027, 6, 14),
        investor_name="Alice Smith",
    )


@pytest.fixture
def intercompany_funding() -> InvestorFunding:
    return InvestorFunding(
        funding_id=102,
        loan_id=2,
        investor_id=12,
        invested_amount=10_000,
        annual_rate=0.12,
        start_date=date(2026, 1, 15),
        end_date=date(2027, 6, 14),
        investor_name="GOODLAND Capital Ltd",
    )
