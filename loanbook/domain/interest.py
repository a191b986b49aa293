"""Upfront interest calculation"""

from datetime import date

from loanbook.domain.models import UpfrontInterestResult
from loanbook.domain.periods import decompose_period


def monthly_rate(annual_rate: float) -> float:
    return annual_rate / 12


def monthly_interest(principal: float, annual_rate: float) -> float:
    """One full month of interest on principal"""
    return principal * monthly_rate(annual_rate)


def prorated_interest(principal: float, annual_rate: float, days: int, month_days: int) -> float:
    """Interest for days out of a month of month_days, at the month's daily rate"""
    daily_rate = monthly_rate(annual_rate) / month_days
    return principal * daily_rate * days


def compute_upfront_interest(
    principal: float,
    annual_rate: float,
    start: date,
    end: date,
) -> UpfrontInterestResult:
    """
    Interest owed upfront for a contract running from start to end.

    Whole months accrue at annual_rate / 12. The residual days accrue at that
    monthly rate divided by the length of the month the residual falls in.
    Nothing is rounded here.
    """
    period = decompose_period(start, end)

    full_months_interest = monthly_rate(annual_rate) * period.full_months * principal

    partial_month_interest = 0.0
    if period.remaining_days > 0:
        partial_month_interest = prorated_interest(
            principal, annual_rate, period.remaining_days, period.days_in_last_month
        )

    return UpfrontInterestResult(
        full_months_interest=full_months_interest,
        partial_month_interest=partial_month_interest,
        total_interest=full_months_interest + partial_month_interest,
        period=period,
    )
