"""Pydantic schemas for API request/response validation"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from loanbook.domain.models import (
    BookSummary,
    BorrowerReminder,
    BorrowerReminderSummary,
    CashflowSummary,
    InterestStatus,
    InvestorFunding,
    InvestorReminderSummary,
    Loan,
    LoanEvaluation,
    LoanStatus,
    MonthlyCashflow,
    PaymentReminderFlag,
    ProjectPayoutReminders,
)
from loanbook.domain.money import round_currency
from loanbook.domain.reminders import parse_reminder_key


class LoanSchema(BaseModel):
    """Loan record with its aggregated interest ledger"""

    model_config = ConfigDict(allow_inf_nan=False)

    loan_id: int
    principal: float = Field(..., description="Loan amount")
    annual_rate: float = Field(..., description="Borrower annual rate as a decimal fraction")
    start_date: date
    repayment_date: date
    expiry_date: Optional[date] = None
    project_id: Optional[int] = None
    project_title: Optional[str] = None
    status: str = "operating"
    default_rate: float = 0.0
    total_interest_paid: float = Field(0.0, description="Gross interest received to date")
    total_net_paid: Optional[float] = None
    total_tax_paid: float = 0.0
    total_fees_paid: float = 0.0
    payment_count: int = Field(0, ge=0)
    last_payment_date: Optional[date] = None
    transaction_date: Optional[date] = None

    def to_domain(self) -> Loan:
        return Loan(**self.model_dump())


class InvestorFundingSchema(BaseModel):
    """Investor funding row"""

    model_config = ConfigDict(allow_inf_nan=False)

    funding_id: int
    loan_id: int
    investor_id: int
    invested_amount: float
    annual_rate: float = Field(..., description="Investor annual rate as a decimal fraction")
    start_date: date
    end_date: date
    transaction_date: Optional[date] = None
    investor_name: Optional[str] = None
    investor_email: Optional[str] = None
    investor_phone: Optional[str] = None
    last_payment_date: Optional[date] = None
    payment_count: int = Field(0, ge=0)

    def to_domain(self) -> InvestorFunding:
        return InvestorFunding(**self.model_dump())


class ReminderFlagSchema(BaseModel):
    """Paid/ignored marker keyed by loan|investor|YYYY-MM-DD"""

    reminder_key: str = Field(..., min_length=1)
    is_paid: bool = False
    is_ignored: bool = False
    marked_paid_at: Optional[datetime] = None
    marked_ignored_at: Optional[datetime] = None
    marked_by_user: Optional[str] = None

    def to_domain(self) -> PaymentReminderFlag:
        """Raises InvalidReminderKeyError for a malformed key"""
        loan_id, investor_id, scheduled_date = parse_reminder_key(self.reminder_key)
        return PaymentReminderFlag(
            loan_id=loan_id,
            investor_id=investor_id,
            scheduled_date=scheduled_date,
            is_paid=self.is_paid,
            is_ignored=self.is_ignored,
            marked_paid_at=self.marked_paid_at,
            marked_ignored_at=self.marked_ignored_at,
            marked_by_user=self.marked_by_user,
        )


class LoanBookRequest(BaseModel):
    """Request body for POST /v1/loans and POST /v1/reminders"""

    loans: List[LoanSchema]


class CashflowRequest(BaseModel):
    """Request body for POST /v1/cashflow/monthly"""

    loans: List[LoanSchema]
    fundings: List[InvestorFundingSchema] = []


class InvestorReminderRequest(BaseModel):
    """Request body for POST /v1/reminders/investors"""

    loans: List[LoanSchema]
    fundings: List[InvestorFundingSchema] = []
    flags: List[ReminderFlagSchema] = []


class LoanView(BaseModel):
    """Evaluated loan as shown on the dashboard"""

    loan_id: int
    project_id: Optional[int]
    project_title: Optional[str]
    principal: float
    borrower_interest_rate: float  # percent
    default_rate: float  # percent
    start_date: date
    repayment_date: date
    expiry_date: Optional[date]
    days_to_maturity: int
    days_to_start: int
    expected_total_interest: float
    expected_full_months_interest: float
    expected_partial_month_interest: float
    contract_full_months: int
    contract_remaining_days: int
    total_interest_paid: float
    payment_count: int
    last_payment_date: Optional[date]
    interest_status: InterestStatus
    loan_status: LoanStatus
    payment_completion: int
    is_special_project: bool

    @classmethod
    def from_evaluation(cls, evaluation: LoanEvaluation) -> "LoanView":
        loan = evaluation.loan
        expected = evaluation.expected_interest
        return cls(
            loan_id=loan.loan_id,
            project_id=loan.project_id,
            project_title=loan.project_title,
            principal=loan.principal,
            borrower_interest_rate=loan.annual_rate * 100,
            default_rate=loan.default_rate * 100,
            start_date=loan.start_date,
            repayment_date=loan.repayment_date,
            expiry_date=loan.expiry_date,
            days_to_maturity=evaluation.days_to_maturity,
            days_to_start=evaluation.days_to_start,
            expected_total_interest=round_currency(expected.total_interest),
            expected_full_months_interest=round_currency(expected.full_months_interest),
            expected_partial_month_interest=round_currency(expected.partial_month_interest),
            contract_full_months=expected.period.full_months,
            contract_remaining_days=expected.period.remaining_days,
            total_interest_paid=round_currency(loan.total_interest_paid),
            payment_count=loan.payment_count,
            last_payment_date=loan.last_payment_date,
            interest_status=evaluation.interest_status,
            loan_status=evaluation.loan_status,
            payment_completion=evaluation.payment_completion,
            is_special_project=evaluation.is_special_project,
        )


class LoanBookResponse(BaseModel):
    """Response for POST /v1/loans"""

    success: bool = True
    as_of: date
    total: int
    data: List[LoanView]
    summary: BookSummary


class CashflowResponse(BaseModel):
    """Response for POST /v1/cashflow/monthly"""

    success: bool = True
    as_of: date
    data: List[MonthlyCashflow]
    summary: CashflowSummary


class BorrowerReminderResponse(BaseModel):
    """Response for POST /v1/reminders"""

    success: bool = True
    as_of: date
    data: List[BorrowerReminder]
    summary: BorrowerReminderSummary


class InvestorReminderResponse(BaseModel):
    """Response for POST /v1/reminders/investors"""

    success: bool = True
    as_of: date
    data: List[ProjectPayoutReminders]
    summary: InvestorReminderSummary
