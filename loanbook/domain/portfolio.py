"""Loan-book evaluation - expected interest and status for every active loan"""

from collections import Counter
from datetime import date
from typing import List, Sequence

from loanbook.domain.interest import compute_upfront_interest
from loanbook.domain.models import (
    BookPolicy,
    BookSummary,
    InterestStatus,
    Loan,
    LoanEvaluation,
    LoanStatus,
    SpecialProjectSummary,
)
from loanbook.domain.money import round_currency, round_percent
from loanbook.domain.status import classify_interest_status, classify_loan_status
from loanbook.utils.date_utils import days_between


def select_active_book(loans: Sequence[Loan], now: date, policy: BookPolicy) -> List[Loan]:
    """
    Loans in an active status that have not yet reached repayment.

    Special-project loans stay in the book past their repayment date.
    """
    return [
        loan
        for loan in loans
        if loan.status in policy.active_statuses
        and (policy.is_special_project(loan.project_id) or loan.repayment_date >= now)
    ]


def evaluate_loan(loan: Loan, now: date, policy: BookPolicy) -> LoanEvaluation:
    expected = compute_upfront_interest(
        loan.principal, loan.annual_rate, loan.start_date, loan.repayment_date
    )
    days_to_maturity = days_between(now, loan.repayment_date)

    interest_status = classify_interest_status(
        expected.total_interest, loan.total_interest_paid, loan.start_date, now
    )
    loan_status = classify_loan_status(
        loan.project_id,
        loan.start_date,
        loan.repayment_date,
        days_to_maturity,
        loan.expiry_date,
        now,
        policy,
    )

    completion = 0
    if loan.total_interest_paid and expected.total_interest > 0:
        completion = round_percent(loan.total_interest_paid / expected.total_interest)

    return LoanEvaluation(
        loan=loan,
        expected_interest=expected,
        interest_status=interest_status,
        loan_status=loan_status,
        days_to_maturity=days_to_maturity,
        days_to_start=days_between(now, loan.start_date),
        payment_completion=completion,
        is_special_project=policy.is_special_project(loan.project_id),
    )


def evaluate_book(loans: Sequence[Loan], now: date, policy: BookPolicy) -> List[LoanEvaluation]:
    """Evaluate every loan, earliest repayment first"""
    evaluations = [evaluate_loan(loan, now, policy) for loan in loans]
    return sorted(evaluations, key=lambda e: e.loan.repayment_date)


def summarize_book(evaluations: Sequence[LoanEvaluation]) -> BookSummary:
    loan_counts = Counter(e.loan_status for e in evaluations)
    interest_counts = Counter(e.interest_status for e in evaluations)

    special = SpecialProjectSummary()
    for evaluation in evaluations:
        if not evaluation.is_special_project:
            continue
        special.total += 1
        if evaluation.loan_status == LoanStatus.OVERDUE:
            special.overdue += 1
        elif evaluation.loan_status == LoanStatus.OVERDUE_EXTENSION:
            special.overdue_extension += 1
        else:
            special.other += 1

    # Totals use the rounded per-loan expected interest, as displayed
    total_expected = sum(round_currency(e.expected_interest.total_interest) for e in evaluations)
    total_collected = sum(e.loan.total_interest_paid for e in evaluations)

    return BookSummary(
        total_loans=len(evaluations),
        loan_status_counts={status.value: loan_counts.get(status, 0) for status in LoanStatus},
        interest_status_counts={status.value: interest_counts.get(status, 0) for status in InterestStatus},
        special_projects=special,
        total_loan_value=round_currency(sum(e.loan.principal for e in evaluations)),
        total_expected_interest=round_currency(total_expected),
        total_interest_collected=round_currency(total_collected),
        collection_rate=round_percent(total_collected / total_expected) if total_expected > 0 else 0,
    )
