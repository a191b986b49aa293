"""Borrower and investor payment reminders"""

import logging
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Sequence, Tuple

from loanbook.domain.exceptions import InvalidReminderKeyError
from loanbook.domain.interest import compute_upfront_interest, monthly_interest, prorated_interest
from loanbook.domain.models import (
    BookPolicy,
    BorrowerReminder,
    BorrowerReminderSummary,
    InvestorFunding,
    InvestorPayoutReminder,
    InvestorReminderSummary,
    Loan,
    LoanStatus,
    PaymentReminderFlag,
    ProjectPayoutReminders,
)
from loanbook.domain.money import round_currency
from loanbook.domain.periods import days_in_month
from loanbook.domain.schedule import generate_schedule, select_anchor
from loanbook.domain.status import classify_loan_status
from loanbook.utils.date_utils import days_between

URGENT_WITHIN_DAYS = 7
PRINCIPAL_LOOKBACK_DAYS = 365
FINAL_PAYOUT_WINDOW_DAYS = 7
PRORATION_THRESHOLD_DAYS = 30


def _urgency(days_until: int) -> str:
    return "urgent" if days_until <= URGENT_WITHIN_DAYS else "upcoming"


# Borrower reminders

def build_borrower_reminders(
    loans: Sequence[Loan],
    now: date,
    policy: BookPolicy,
    window_days: int = 14,
) -> Tuple[List[BorrowerReminder], BorrowerReminderSummary]:
    """
    Upfront interest due at contract start and principal due at repayment.

    Principal reminders reach back a year so that unpaid overdue principal
    stays visible.
    """
    reminders: List[BorrowerReminder] = []

    for loan in loans:
        title = loan.project_title or "Unknown Project"

        days_to_start = days_between(now, loan.start_date)
        if 0 <= days_to_start <= window_days:
            upfront = compute_upfront_interest(
                loan.principal, loan.annual_rate, loan.start_date, loan.repayment_date
            )
            reminders.append(
                BorrowerReminder(
                    loan_id=loan.loan_id,
                    project_title=title,
                    loan_amount=loan.principal,
                    due_date=loan.start_date,
                    days_until_due=days_to_start,
                    urgency_level=_urgency(days_to_start),
                    reminder_type="upfront_interest",
                    status="upcoming",
                    expected_interest=round_currency(upfront.total_interest),
                )
            )

        days_to_principal = days_between(now, loan.repayment_date)
        if -PRINCIPAL_LOOKBACK_DAYS <= days_to_principal <= window_days:
            loan_status = classify_loan_status(
                loan.project_id,
                loan.start_date,
                loan.repayment_date,
                days_to_principal,
                loan.expiry_date,
                now,
                policy,
            )

            status = "upcoming"
            urgency = "upcoming"
            if loan_status in (LoanStatus.OVERDUE, LoanStatus.OVERDUE_EXTENSION):
                status = loan_status.value
                urgency = "urgent"
            elif days_to_principal <= URGENT_WITHIN_DAYS:
                urgency = "urgent"

            reminders.append(
                BorrowerReminder(
                    loan_id=loan.loan_id,
                    project_title=title,
                    loan_amount=loan.principal,
                    due_date=loan.repayment_date,
                    days_until_due=days_to_principal,
                    urgency_level=urgency,
                    reminder_type="principal_payment",
                    status=status,
                    loan_status=loan_status,
                    is_special_project=policy.is_special_project(loan.project_id),
                )
            )

    reminders.sort(key=lambda r: r.due_date)

    summary = BorrowerReminderSummary(
        urgent=sum(1 for r in reminders if r.urgency_level == "urgent"),
        upcoming=sum(1 for r in reminders if r.urgency_level == "upcoming"),
        overdue=sum(1 for r in reminders if r.status == LoanStatus.OVERDUE.value),
        overdue_extension=sum(1 for r in reminders if r.status == LoanStatus.OVERDUE_EXTENSION.value),
        upfront_interest=sum(1 for r in reminders if r.reminder_type == "upfront_interest"),
        principal_payments=sum(1 for r in reminders if r.reminder_type == "principal_payment"),
        special_projects=sum(1 for r in reminders if r.is_special_project),
    )
    return reminders, summary


# Reminder flags

def parse_reminder_key(key: str) -> Tuple[int, int, date]:
    """Split a "loan|investor|YYYY-MM-DD" key"""
    parts = key.split("|")
    if len(parts) != 3:
        raise InvalidReminderKeyError(f"Expected loan|investor|date, got {key!r}")
    try:
        return int(parts[0]), int(parts[1]), date.fromisoformat(parts[2])
    except ValueError as e:
        raise InvalidReminderKeyError(f"Malformed reminder key {key!r}: {e}") from e


def _marked_within(marked_at: Optional[datetime], now: date, window_days: int) -> bool:
    if marked_at is None:
        return False
    return (now - marked_at.date()).days <= window_days


def visible_flags(
    flags: Sequence[PaymentReminderFlag],
    now: date,
    window_days: int = 15,
) -> List[PaymentReminderFlag]:
    """Active flags, plus paid or ignored flags marked within the last window_days"""
    visible = []
    for flag in flags:
        if not flag.is_paid and not flag.is_ignored:
            visible.append(flag)
        elif flag.is_paid and _marked_within(flag.marked_paid_at, now, window_days):
            visible.append(flag)
        elif flag.is_ignored and _marked_within(flag.marked_ignored_at, now, window_days):
            visible.append(flag)
    return visible


# Investor reminders

def _is_final_payout(payment_date: date, end_date: date) -> bool:
    return payment_date == end_date or (
        payment_date > end_date and (payment_date - end_date).days < FINAL_PAYOUT_WINDOW_DAYS
    )


def investor_payout_amount(funding: InvestorFunding, payment_date: date) -> Tuple[float, Optional[int]]:
    """
    Amount owed to an investor on payment_date and, for a final payout, its day count.

    The final payout is prorated over the days since the last payout (or the
    funding start) when that stretch is shorter than a month.
    """
    amount = monthly_interest(funding.invested_amount, funding.annual_rate)

    if not _is_final_payout(payment_date, funding.end_date):
        return amount, None

    since = funding.last_payment_date or funding.start_date
    remaining_days = days_between(since, funding.end_date)

    if remaining_days < PRORATION_THRESHOLD_DAYS:
        amount = prorated_interest(
            funding.invested_amount,
            funding.annual_rate,
            remaining_days,
            days_in_month(funding.end_date),
        )
        logging.debug(
            "Prorated final investor payout",
            extra={
                "step": "investor_proration",
                "loan_id": funding.loan_id,
                "investor_id": funding.investor_id,
                "remaining_days": remaining_days,
                "amount": amount,
            },
        )

    return amount, remaining_days


def build_investor_reminders(
    loans: Sequence[Loan],
    fundings: Sequence[InvestorFunding],
    flags: Sequence[PaymentReminderFlag],
    now: date,
    days_ahead: int = 30,
    flag_visibility_days: int = 15,
) -> Tuple[List[ProjectPayoutReminders], InvestorReminderSummary]:
    """
    Upcoming investor payouts within days_ahead, grouped by project.

    Fundings whose loan is not in loans are skipped. Each payout is annotated
    with the paid/ignored flag recorded for the same loan, investor and date.
    """
    horizon_end = now + timedelta(days=days_ahead)
    loans_by_id = {loan.loan_id: loan for loan in loans}
    flags_by_key = {flag.key: flag for flag in visible_flags(flags, now, flag_visibility_days)}

    groups: Dict[str, ProjectPayoutReminders] = {}

    for funding in fundings:
        loan = loans_by_id.get(funding.loan_id)
        if loan is None:
            continue

        anchor = select_anchor(funding.last_payment_date, funding.start_date, funding.transaction_date)
        schedule = generate_schedule(
            anchor,
            funding.end_date,
            horizon_end,
            has_prior_payment=funding.last_payment_date is not None,
            now=now,
        )

        for payment_date in schedule:
            days_until = days_between(now, payment_date)
            if not 0 <= days_until <= days_ahead:
                continue

            amount, final_days = investor_payout_amount(funding, payment_date)
            standard = monthly_interest(funding.invested_amount, funding.annual_rate)

            key = f"{funding.loan_id}|{funding.investor_id}|{payment_date.isoformat()}"
            flag = flags_by_key.get(key)

            group_key = f"project-{loan.project_id}" if loan.project_id is not None else f"loan-{loan.loan_id}"
            group = groups.get(group_key)
            if group is None:
                group = ProjectPayoutReminders(
                    project_id=loan.project_id,
                    project_title=loan.project_title,
                    loan_id=loan.loan_id,
                    loan_amount=loan.principal,
                )
                groups[group_key] = group

            group.payments.append(
                InvestorPayoutReminder(
                    funding_id=funding.funding_id,
                    investor_id=funding.investor_id,
                    investor_name=funding.display_name,
                    investor_email=funding.investor_email,
                    investor_phone=funding.investor_phone,
                    investment_amount=funding.invested_amount,
                    annual_rate=funding.annual_rate * 100,
                    payment_amount=amount,
                    scheduled_date=payment_date,
                    days_until_payment=days_until,
                    last_payment_date=funding.last_payment_date,
                    payment_count=funding.payment_count,
                    urgency_level=_urgency(days_until),
                    reminder_key=key,
                    is_paid=flag.is_paid if flag else False,
                    is_ignored=flag.is_ignored if flag else False,
                    marked_paid_at=flag.marked_paid_at if flag else None,
                    marked_ignored_at=flag.marked_ignored_at if flag else None,
                    marked_by_user=flag.marked_by_user if flag else None,
                    is_prorated=final_days is not None and amount < standard,
                    prorated_days=final_days,
                )
            )
            group.total_payment_amount += amount
            if days_until <= URGENT_WITHIN_DAYS:
                group.urgency_level = "urgent"

    for group in groups.values():
        group.total_investors = len({p.investor_id for p in group.payments})
        group.payments.sort(key=lambda p: p.days_until_payment)
        group.total_payment_amount = round_currency(group.total_payment_amount)
        for payment in group.payments:
            payment.payment_amount = round_currency(payment.payment_amount)

    ordered = sorted(
        groups.values(),
        key=lambda g: (g.urgency_level != "urgent", min(p.days_until_payment for p in g.payments)),
    )

    payments = [p for g in ordered for p in g.payments]
    summary = InvestorReminderSummary(
        total_projects=len(ordered),
        total_investors=len({p.investor_id for p in payments}),
        total_payment_amount=round_currency(sum(g.total_payment_amount for g in ordered)),
        urgent_projects=sum(1 for g in ordered if g.urgency_level == "urgent"),
        urgent_payments=sum(1 for p in payments if p.urgency_level == "urgent"),
        unpaid_payments=sum(1 for p in payments if not p.is_paid and not p.is_ignored),
        paid_payments=sum(1 for p in payments if p.is_paid),
        ignored_payments=sum(1 for p in payments if p.is_ignored),
        overdue_payments=sum(
            1 for p in payments if p.days_until_payment < 0 and not p.is_paid and not p.is_ignored
        ),
    )
    return ordered, summary
