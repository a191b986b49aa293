"""Unit tests for contract period decomposition"""

from datetime import date

from loanbook.domain.periods import days_in_month, decompose_period, next_due_date


def test_decompose_period_months_and_residual_days():
    period = decompose_period(date(2024, 1, 15), date(2024, 4, 20))

    assert period.full_months == 3
    assert period.remaining_days == 5
    assert period.days_in_last_month == 30  # April
    assert period.total_days == 96


def test_decompose_period_clamps_month_end_in_leap_year():
    """Jan 31 -> Feb 29; Mar 29 would pass the end date"""
    period = decompose_period(date(2024, 1, 31), date(2024, 3, 1))

    assert period.full_months == 1
    assert period.remaining_days == 1
    assert period.days_in_last_month == 29


def test_decompose_period_clamps_month_end_in_common_year():
    period = decompose_period(date(2023, 1, 31), date(2023, 3, 1))

    assert period.full_months == 1
    assert period.remaining_days == 1
    assert period.days_in_last_month == 28


def test_decompose_period_walks_from_clamped_boundary():
    """After clamping to Feb 29 the walk continues from the 29th"""
    period = decompose_period(date(2024, 1, 31), date(2024, 4, 30))

    # Feb 29, Mar 29, Apr 29
    assert period.full_months == 3
    assert period.remaining_days == 1


def test_decompose_period_exact_months():
    period = decompose_period(date(2026, 1, 1), date(2027, 1, 1))

    assert period.full_months == 12
    assert period.remaining_days == 0
    assert period.total_days == 365


def test_decompose_period_degenerate_range():
    """end <= start decomposes to nothing rather than raising"""
    reversed_period = decompose_period(date(2024, 5, 10), date(2024, 5, 1))
    empty_period = decompose_period(date(2024, 5, 10), date(2024, 5, 10))

    for period in (reversed_period, empty_period):
        assert period.full_months == 0
        assert period.remaining_days == 0
        assert period.total_days == 0
        assert period.days_in_last_month == 31  # May


def test_days_in_month():
    assert days_in_month(date(2024, 2, 10)) == 29
    assert days_in_month(date(2026, 2, 10)) == 28
    assert days_in_month(date(2026, 11, 30)) == 30
    assert days_in_month(date(2026, 12, 1)) == 31


def test_next_due_date_is_one_month_less_one_day():
    assert next_due_date(date(2026, 10, 5)) == date(2026, 11, 4)
    assert next_due_date(date(2026, 1, 1)) == date(2026, 1, 31)
    assert next_due_date(date(2024, 1, 31)) == date(2024, 2, 28)
