"""Monthly cashflow projection - borrower income, principal and investor payouts"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence, Tuple

from loanbook.domain.interest import compute_upfront_interest, monthly_interest, prorated_interest
from loanbook.domain.models import (
    BookPolicy,
    CashflowProjection,
    CashflowSummary,
    InterestPaymentItem,
    InvestorFunding,
    InvestorPayoutItem,
    Loan,
    LoanMaturityItem,
    MonthlyCashflow,
    PaymentAnalysis,
)
from loanbook.domain.money import collection_rate, round_currency
from loanbook.domain.periods import days_in_month
from loanbook.domain.schedule import generate_schedule, is_payment_due_in_month, select_anchor
from loanbook.utils.date_utils import iter_months

FULLY_PAID_THRESHOLD = 0.99


@dataclass
class _LoanLedger:
    """Per-loan figures fixed for the whole projection"""

    loan: Loan
    expected_interest: float
    schedule: List[date]
    net_ratio: float
    tax_ratio: float
    fee_ratio: float

    @property
    def fully_paid(self) -> bool:
        return self.loan.total_interest_paid >= self.expected_interest * FULLY_PAID_THRESHOLD


def _build_ledger(loan: Loan, horizon_end: date, now: date) -> _LoanLedger:
    expected = compute_upfront_interest(
        loan.principal, loan.annual_rate, loan.start_date, loan.repayment_date
    )

    anchor = select_anchor(loan.last_payment_date, loan.start_date, loan.transaction_date)
    schedule = generate_schedule(
        anchor,
        loan.repayment_date,
        horizon_end,
        has_prior_payment=loan.last_payment_date is not None,
        now=now,
    )

    # Lifetime ratios; a loan with no gross payments yet divides by 1
    gross_paid = loan.total_interest_paid or 1

    return _LoanLedger(
        loan=loan,
        expected_interest=expected.total_interest,
        schedule=schedule,
        net_ratio=loan.net_paid / gross_paid,
        tax_ratio=loan.total_tax_paid / gross_paid,
        fee_ratio=loan.total_fees_paid / gross_paid,
    )


def _due_date_in_month(schedule: Sequence[date], month_start: date, month_end: date) -> Optional[date]:
    for payment_date in schedule:
        if is_payment_due_in_month(payment_date, month_start, month_end):
            return payment_date
    return None


def _borrower_income(
    ledger: _LoanLedger,
    month_start: date,
    month_end: date,
) -> Optional[InterestPaymentItem]:
    """
    Interest expected from one borrower in a month, or None.

    Only loans with net interest received to date project income, and only in
    months where their schedule has a payment. The loan's final month is
    prorated by the days up to and including the repayment date.
    """
    loan = ledger.loan
    if not (loan.start_date <= month_end and loan.repayment_date >= month_start):
        return None
    if loan.net_paid <= 0:
        return None

    due_date = _due_date_in_month(ledger.schedule, month_start, month_end)
    if due_date is None:
        return None

    if month_start <= loan.repayment_date <= month_end:
        month_days = days_in_month(month_start)
        actual_days = min((loan.repayment_date - month_start).days + 1, month_days)
        gross = prorated_interest(loan.principal, loan.annual_rate, actual_days, month_days)
        payment_type = "prorated_final"
        logging.debug(
            "Prorated final borrower payment",
            extra={
                "step": "borrower_proration",
                "loan_id": loan.loan_id,
                "actual_days": actual_days,
                "month_days": month_days,
                "gross_amount": gross,
            },
        )
    else:
        gross = monthly_interest(loan.principal, loan.annual_rate)
        payment_type = "scheduled_monthly"

    return InterestPaymentItem(
        loan_id=loan.loan_id,
        project_title=loan.project_title,
        gross_amount=gross,
        net_amount=gross * ledger.net_ratio,
        tax_amount=gross * ledger.tax_ratio,
        fee_amount=gross * ledger.fee_ratio,
        payment_date=due_date,
        type=payment_type,
        actual_paid_gross=loan.total_interest_paid,
        actual_paid_net=loan.net_paid,
        expected_total=ledger.expected_interest,
        payment_status="fully_paid" if ledger.fully_paid else "partial_paid",
    )


def _investor_payout(
    funding: InvestorFunding,
    month_start: date,
    month_end: date,
    policy: BookPolicy,
) -> Optional[InvestorPayoutItem]:
    if not (funding.start_date <= month_end and funding.end_date >= month_start):
        return None

    return InvestorPayoutItem(
        investor_id=funding.investor_id,
        investor_name=funding.display_name,
        loan_id=funding.loan_id,
        amount=monthly_interest(funding.invested_amount, funding.annual_rate),
        excluded=policy.is_operating_company(funding.investor_name),
    )


def _project_month(
    month_start: date,
    month_end: date,
    ledgers: Sequence[_LoanLedger],
    fundings: Sequence[InvestorFunding],
    policy: BookPolicy,
) -> Tuple[MonthlyCashflow, float, float]:
    """Accumulate one month unrounded, then round every figure once"""
    net = gross = taxes = fees = principal = payouts = excluded = 0.0

    interest_payments: List[InterestPaymentItem] = []
    maturities: List[LoanMaturityItem] = []
    investor_payouts: List[InvestorPayoutItem] = []

    for ledger in ledgers:
        loan = ledger.loan

        payment = _borrower_income(ledger, month_start, month_end)
        if payment is not None:
            gross += payment.gross_amount
            net += payment.net_amount
            taxes += payment.tax_amount
            fees += payment.fee_amount
            interest_payments.append(payment)

        if month_start <= loan.repayment_date <= month_end:
            principal += loan.principal
            maturities.append(
                LoanMaturityItem(
                    loan_id=loan.loan_id,
                    project_title=loan.project_title,
                    amount=round_currency(loan.principal),
                    maturity_date=loan.repayment_date,
                )
            )

    for funding in fundings:
        payout = _investor_payout(funding, month_start, month_end, policy)
        if payout is None:
            continue
        # Payouts to the operating company are itemised but are not external outflow
        if payout.excluded:
            excluded += payout.amount
        else:
            payouts += payout.amount
        investor_payouts.append(payout)

    inflow = net + principal

    for item in interest_payments:
        item.gross_amount = round_currency(item.gross_amount)
        item.net_amount = round_currency(item.net_amount)
        item.tax_amount = round_currency(item.tax_amount)
        item.fee_amount = round_currency(item.fee_amount)
        item.expected_total = round_currency(item.expected_total)
        item.actual_paid_gross = round_currency(item.actual_paid_gross)
        item.actual_paid_net = round_currency(item.actual_paid_net)
    for payout in investor_payouts:
        payout.amount = round_currency(payout.amount)

    return MonthlyCashflow(
        month=month_start.strftime("%Y-%m"),
        month_name=month_start.strftime("%B %Y"),
        month_start=month_start,
        month_end=month_end,
        total_interest_receivable=round_currency(net),
        total_interest_gross=round_currency(gross),
        total_taxes=round_currency(taxes),
        total_fees=round_currency(fees),
        total_principal_due=round_currency(principal),
        total_cash_inflow=round_currency(inflow),
        total_investor_payouts=round_currency(payouts),
        excluded_investor_payouts=round_currency(excluded),
        net_cashflow=round_currency(inflow - payouts),
        interest_payments=interest_payments,
        loan_maturities=maturities,
        investor_payouts=investor_payouts,
    ), inflow, payouts


def _analyze_payments(ledgers: Sequence[_LoanLedger]) -> PaymentAnalysis:
    """Collection statistics; counts use gross interest received against expected upfront interest"""
    total_gross = sum(ledger.loan.total_interest_paid for ledger in ledgers)
    total_net = sum(ledger.loan.net_paid for ledger in ledgers)
    total_expected = sum(ledger.expected_interest for ledger in ledgers)

    with_payments = [ledger for ledger in ledgers if ledger.loan.total_interest_paid > 0]

    return PaymentAnalysis(
        total_loans=len(ledgers),
        loans_with_payments=len(with_payments),
        fully_paid_loans=sum(1 for ledger in ledgers if ledger.fully_paid),
        partially_paid_loans=sum(1 for ledger in with_payments if not ledger.fully_paid),
        unpaid_loans=sum(1 for ledger in ledgers if ledger.loan.total_interest_paid == 0),
        total_actual_payments_gross=round_currency(total_gross),
        total_actual_payments_net=round_currency(total_net),
        total_expected_payments=round_currency(total_expected),
        total_taxes_paid=round_currency(sum(ledger.loan.total_tax_paid for ledger in ledgers)),
        total_fees_paid=round_currency(sum(ledger.loan.total_fees_paid for ledger in ledgers)),
        collection_rate_gross=collection_rate(total_gross, total_expected),
        collection_rate_net=collection_rate(total_net, total_expected),
    )


def project_cashflow(
    loans: Sequence[Loan],
    fundings: Sequence[InvestorFunding],
    horizon_months: int,
    now: date,
    policy: BookPolicy,
) -> CashflowProjection:
    """
    Project net cashflow for horizon_months calendar months starting with the month of now.

    Inflow is net borrower interest plus principal maturing in the month;
    outflow is investor interest, minus payouts to the operating company.
    A non-positive horizon yields an empty projection.
    """
    month_bounds = list(iter_months(now, max(horizon_months, 0)))
    horizon_end = month_bounds[-1][1] if month_bounds else now

    ledgers = [_build_ledger(loan, horizon_end, now) for loan in loans]

    months: List[MonthlyCashflow] = []
    total_inflows = total_outflows = 0.0

    for month_start, month_end in month_bounds:
        month, inflow, outflow = _project_month(month_start, month_end, ledgers, fundings, policy)
        months.append(month)
        total_inflows += inflow
        total_outflows += outflow

    summary = CashflowSummary(
        total_inflows=round_currency(total_inflows),
        total_outflows=round_currency(total_outflows),
        total_net_cashflow=round_currency(total_inflows - total_outflows),
        total_investors=len({f.investor_id for f in fundings}),
        payment_analysis=_analyze_payments(ledgers),
    )

    return CashflowProjection(months=months, summary=summary)
