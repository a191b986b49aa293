"""Recurring payment-date schedule shared by borrower and investor legs"""

from datetime import date
from typing import List, Optional

from loanbook.domain.periods import next_due_date


def select_anchor(
    last_payment_date: Optional[date],
    start_date: date,
    transaction_date: Optional[date] = None,
) -> date:
    """Last payment if there was one, otherwise the later of start and transaction date"""
    if last_payment_date is not None:
        return last_payment_date
    if transaction_date is not None and transaction_date > start_date:
        return transaction_date
    return start_date


def generate_schedule(
    anchor: date,
    end_date: date,
    horizon_end: date,
    has_prior_payment: bool,
    now: date,
) -> List[date]:
    """
    Payment dates from anchor, stepping one month minus one day at a time.

    With a prior payment the anchor itself was already paid, so the first date
    is one step after it. Dates before now are skipped; generation stops at the
    earlier of end_date and horizon_end. Recomputed from the inputs on every
    call.
    """
    payments: List[date] = []

    current = next_due_date(anchor) if has_prior_payment else anchor

    while current <= end_date and current <= horizon_end:
        if current >= now:
            payments.append(current)
        current = next_due_date(current)

    return payments


def is_payment_due_in_month(payment_date: date, month_start: date, month_end: date) -> bool:
    return month_start <= payment_date <= month_end
