"""Calendar arithmetic for contract periods"""

import calendar
from datetime import date

from dateutil.relativedelta import relativedelta

from loanbook.domain.models import ContractPeriod


def days_in_month(day: date) -> int:
    """Number of days in the calendar month containing day"""
    return calendar.monthrange(day.year, day.month)[1]


def add_months(day: date, months: int) -> date:
    """Advance by calendar months, clamping to the last valid day of the target month"""
    return day + relativedelta(months=months)


def next_due_date(day: date) -> date:
    """One month minus one day after day"""
    return add_months(day, 1) - relativedelta(days=1)


def decompose_period(start: date, end: date) -> ContractPeriod:
    """
    Split [start, end] into whole calendar months plus residual days.

    Months are walked one at a time from the previous boundary, so a contract
    anchored on the 31st drifts to the 29th/30th after a short month:
    2024-01-31 -> 2024-02-29 -> 2024-03-29.

    A range with end <= start is not rejected; it decomposes to zero months
    and zero days.
    """
    full_months = 0
    boundary = start

    while boundary < end:
        candidate = add_months(boundary, 1)
        if candidate > end:
            break
        full_months += 1
        boundary = candidate

    return ContractPeriod(
        full_months=full_months,
        remaining_days=max((end - boundary).days, 0),
        days_in_last_month=days_in_month(boundary),
        total_days=max((end - start).days, 0),
    )
