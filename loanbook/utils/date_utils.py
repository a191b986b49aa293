"""Date manipulation utilities"""

from datetime import date
from typing import Iterator, Tuple

from dateutil.relativedelta import relativedelta


def days_between(start: date, end: date) -> int:
    """Signed whole days from start to end"""
    return (end - start).days


def month_bounds(day: date) -> Tuple[date, date]:
    """First and last day of the calendar month containing day"""
    first = day.replace(day=1)
    last = first + relativedelta(months=1, days=-1)
    return first, last


def iter_months(first_month: date, count: int) -> Iterator[Tuple[date, date]]:
    """Yield (month_start, month_end) for count consecutive months"""
    start, _ = month_bounds(first_month)
    for offset in range(count):
        yield month_bounds(start + relativedelta(months=offset))
