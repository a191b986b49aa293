"""Unit tests for payment schedule generation"""

from datetime import date, timedelta

from loanbook.domain.schedule import generate_schedule, is_payment_due_in_month, select_anchor

NOW = date(2026, 10, 18)


def test_select_anchor_prefers_last_payment():
    assert select_anchor(date(2026, 9, 3), date(2026, 1, 10), date(2026, 1, 20)) == date(2026, 9, 3)


def test_select_anchor_later_of_start_and_transaction():
    assert select_anchor(None, date(2026, 1, 10), date(2026, 1, 20)) == date(2026, 1, 20)
    assert select_anchor(None, date(2026, 1, 10), date(2026, 1, 5)) == date(2026, 1, 10)
    assert select_anchor(None, date(2026, 1, 10)) == date(2026, 1, 10)


def test_schedule_after_prior_payment_starts_one_step_later():
    schedule = generate_schedule(
        date(2026, 10, 5),
        end_date=date(2027, 6, 30),
        horizon_end=date(2027, 3, 31),
        has_prior_payment=True,
        now=NOW,
    )

    assert schedule == [
        date(2026, 11, 4),
        date(2026, 12, 3),
        date(2027, 1, 2),
        date(2027, 2, 1),
        date(2027, 2, 28),
        date(2027, 3, 27),
    ]


def test_schedule_without_prior_payment_includes_anchor_and_drops_past_dates():
    schedule = generate_schedule(
        date(2026, 9, 1),
        end_date=date(2026, 12, 31),
        horizon_end=date(2027, 12, 31),
        has_prior_payment=False,
        now=NOW,
    )

    # Sep 1 and Sep 30 have already passed
    assert schedule == [date(2026, 10, 29), date(2026, 11, 28), date(2026, 12, 27)]


def test_schedule_keeps_date_equal_to_now():
    schedule = generate_schedule(NOW, date(2026, 12, 31), date(2026, 12, 31), False, NOW)

    assert schedule[0] == NOW


def test_schedule_empty_when_contract_already_ended():
    assert generate_schedule(date(2026, 1, 5), date(2026, 6, 30), date(2027, 1, 1), True, NOW) == []


def test_schedule_dates_are_monotonic_and_bounded():
    anchors = [date(2026, 1, 31), date(2026, 2, 28), date(2026, 8, 30), date(2026, 10, 18), date(2026, 12, 31)]
    for anchor in anchors:
        for has_prior in (True, False):
            end_date = date(2028, 3, 15)
            horizon_end = date(2027, 10, 31)
            schedule = generate_schedule(anchor, end_date, horizon_end, has_prior, NOW)

            assert schedule
            for earlier, later in zip(schedule, schedule[1:]):
                assert 27 <= (later - earlier).days <= 31
            assert all(NOW <= d <= min(end_date, horizon_end) for d in schedule)


def test_schedule_is_recomputed_from_inputs():
    args = (date(2026, 10, 5), date(2027, 6, 30), date(2027, 3, 31), True, NOW)

    assert generate_schedule(*args) == generate_schedule(*args)


def test_is_payment_due_in_month_inclusive_bounds():
    month_start, month_end = date(2026, 11, 1), date(2026, 11, 30)

    assert is_payment_due_in_month(month_start, month_start, month_end)
    assert is_payment_due_in_month(month_end, month_start, month_end)
    assert not is_payment_due_in_month(month_end + timedelta(days=1), month_start, month_end)
