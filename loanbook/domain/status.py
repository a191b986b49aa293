"""Payment-status and loan-status classification"""

import logging
from datetime import date
from typing import Optional

from loanbook.domain.models import BookPolicy, InterestStatus, LoanStatus

PAYMENT_TOLERANCE = 0.01
LARGE_INTEREST_THRESHOLD = 30_000


def classify_interest_status(
    expected: float,
    actual_paid: Optional[float],
    contract_start: date,
    now: date,
) -> InterestStatus:
    """
    Classify an upfront interest obligation.

    The whole obligation falls due on the start date, so once the contract has
    started an unpaid loan is overdue immediately. Payments within 1% of the
    expected amount count as paid.
    """
    paid = actual_paid or 0.0
    traced = expected > LARGE_INTEREST_THRESHOLD or paid > 0

    if now < contract_start:
        status = InterestStatus.PENDING
    elif paid == 0:
        status = InterestStatus.OVERDUE
    else:
        tolerance = expected * PAYMENT_TOLERANCE
        status = InterestStatus.PAID if paid >= expected - tolerance else InterestStatus.PARTIAL

    if traced:
        logging.debug(
            "Interest status classified",
            extra={
                "step": "interest_status",
                "contract_start": contract_start.isoformat(),
                "as_of": now.isoformat(),
                "expected_interest": expected,
                "actual_paid": paid,
                "interest_status": status.value,
            },
        )

    return status


def special_project_override(
    end: date,
    expiry: Optional[date],
    now: date,
) -> Optional[LoanStatus]:
    """
    Lifecycle override for special projects; None falls through to the normal rules.

    Runs before the normal rules, so a special-project loan past its repayment
    date reads overdue even where the normal rules would say completed. A
    missing expiry counts as earlier than any repayment date.
    """
    if end < now:
        return LoanStatus.OVERDUE
    if expiry is None or expiry < end:
        return LoanStatus.OVERDUE_EXTENSION
    return None


def classify_loan_status(
    project_id: Optional[int],
    start: date,
    end: date,
    days_to_maturity: int,
    expiry: Optional[date],
    now: date,
    policy: BookPolicy,
) -> LoanStatus:
    """Place a loan in its lifecycle relative to now"""
    if policy.is_special_project(project_id):
        override = special_project_override(end, expiry, now)
        if override is not None:
            return override

    if start > now:
        return LoanStatus.STARTING_SOON if days_to_maturity <= 14 else LoanStatus.PENDING

    if end < now:
        return LoanStatus.COMPLETED

    if days_to_maturity <= 0:
        return LoanStatus.OVERDUE
    elif days_to_maturity <= 7:
        return LoanStatus.DUE_SOON
    elif days_to_maturity <= 14:
        return LoanStatus.DUE_THIS_WEEK
    elif days_to_maturity <= 30:
        return LoanStatus.DUE_THIS_MONTH
    else:
        return LoanStatus.ACTIVE
