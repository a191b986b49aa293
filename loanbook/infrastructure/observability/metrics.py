"""Prometheus metrics for projections, status classification and reminders"""

from typing import Iterable

from prometheus_client import Counter, Histogram

from loanbook.domain.models import InvestorPayoutItem, LoanStatus

# Engine metrics
projection_counter = Counter(
    "loanbook_cashflow_projections_total",
    "Cashflow projections computed",
)

loan_status_counter = Counter(
    "loanbook_loan_status_total",
    "Loan status classifications",
    ["status"],
)

excluded_payout_counter = Counter(
    "loanbook_excluded_investor_payouts_total",
    "Investor payouts excluded from outflow as intercompany",
)

reminder_counter = Counter(
    "loanbook_reminders_total",
    "Payment reminders generated",
    ["kind"],  # borrower | investor
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_loan_statuses(statuses: Iterable[LoanStatus]) -> None:
    for status in statuses:
        loan_status_counter.labels(status=status.value).inc()


def record_projection(payouts: Iterable[InvestorPayoutItem]) -> None:
    """Record one projection and every intercompany payout it left out of outflow"""
    projection_counter.inc()
    excluded = sum(1 for payout in payouts if payout.excluded)
    if excluded:
        excluded_payout_counter.inc(excluded)


def record_reminders(kind: str, count: int) -> None:
    reminder_counter.labels(kind=kind).inc(count)
