"""Domain models - pure Python dataclasses representing lending-book entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, FrozenSet, List, Optional


class InterestStatus(str, Enum):
    """Upfront interest payment status"""

    PENDING = "pending"
    OVERDUE = "overdue"
    PARTIAL = "partial"
    PAID = "paid"


class LoanStatus(str, Enum):
    """Lifecycle position of a loan relative to today"""

    PENDING = "pending"
    STARTING_SOON = "starting_soon"
    ACTIVE = "active"
    DUE_THIS_MONTH = "due_this_month"
    DUE_THIS_WEEK = "due_this_week"
    DUE_SOON = "due_soon"
    OVERDUE = "overdue"
    OVERDUE_EXTENSION = "overdue-extension"
    COMPLETED = "completed"


@dataclass(frozen=True)
class BookPolicy:
    """Policy constants for one lending book"""

    special_project_ids: FrozenSet[int] = frozenset()
    operating_company_name: str = ""
    active_statuses: FrozenSet[str] = frozenset({"operating", "performing"})

    def is_special_project(self, project_id: Optional[int]) -> bool:
        return project_id is not None and project_id in self.special_project_ids

    def is_operating_company(self, name: Optional[str]) -> bool:
        """Case-insensitive substring match on an investor display name"""
        if not name or not self.operating_company_name:
            return False
        return self.operating_company_name.lower() in name.lower()


@dataclass(frozen=True)
class ContractPeriod:
    """Whole-month and residual-day decomposition of a date range"""

    full_months: int
    remaining_days: int
    days_in_last_month: int
    total_days: int


@dataclass(frozen=True)
class UpfrontInterestResult:
    """Interest owed upfront for a contract period (unrounded)"""

    full_months_interest: float
    partial_month_interest: float
    total_interest: float
    period: ContractPeriod


@dataclass
class Loan:
    """Loan (stage) record with its pre-aggregated interest ledger"""

    loan_id: int
    principal: float
    annual_rate: float  # decimal fraction, e.g. 0.1085
    start_date: date
    repayment_date: date
    expiry_date: Optional[date] = None
    project_id: Optional[int] = None
    project_title: Optional[str] = None
    status: str = "operating"
    default_rate: float = 0.0
    total_interest_paid: float = 0.0  # gross
    total_net_paid: Optional[float] = None
    total_tax_paid: float = 0.0
    total_fees_paid: float = 0.0
    payment_count: int = 0
    last_payment_date: Optional[date] = None
    transaction_date: Optional[date] = None

    @property
    def net_paid(self) -> float:
        """Net interest received; derived from gross when the ledger has no net column"""
        if self.total_net_paid is not None:
            return self.total_net_paid
        return self.total_interest_paid - self.total_tax_paid - self.total_fees_paid


@dataclass
class InvestorFunding:
    """Investor funding row for a loan"""

    funding_id: int
    loan_id: int
    investor_id: int
    invested_amount: float
    annual_rate: float
    start_date: date
    end_date: date
    transaction_date: Optional[date] = None
    investor_name: Optional[str] = None
    investor_email: Optional[str] = None
    investor_phone: Optional[str] = None
    last_payment_date: Optional[date] = None
    payment_count: int = 0

    @property
    def display_name(self) -> str:
        return self.investor_name or f"Investor {self.investor_id}"


@dataclass
class PaymentReminderFlag:
    """Paid/ignored marker for one scheduled investor payout"""

    loan_id: int
    investor_id: int
    scheduled_date: date
    is_paid: bool = False
    is_ignored: bool = False
    marked_paid_at: Optional[datetime] = None
    marked_ignored_at: Optional[datetime] = None
    marked_by_user: Optional[str] = None

    @property
    def key(self) -> str:
        return f"{self.loan_id}|{self.investor_id}|{self.scheduled_date.isoformat()}"


# Cashflow projection

@dataclass
class InterestPaymentItem:
    """Borrower interest expected in a month"""

    loan_id: int
    project_title: Optional[str]
    gross_amount: float
    net_amount: float
    tax_amount: float
    fee_amount: float
    payment_date: date
    type: str  # "scheduled_monthly" | "prorated_final"
    actual_paid_gross: float
    actual_paid_net: float
    expected_total: float
    payment_status: str  # "fully_paid" | "partial_paid"


@dataclass
class LoanMaturityItem:
    """Principal repayment falling in a month"""

    loan_id: int
    project_title: Optional[str]
    amount: float
    maturity_date: date


@dataclass
class InvestorPayoutItem:
    """Investor interest payout owed in a month"""

    investor_id: int
    investor_name: str
    loan_id: int
    amount: float
    excluded: bool = False


@dataclass
class MonthlyCashflow:
    """Finalised cashflow figures for one calendar month"""

    month: str  # YYYY-MM
    month_name: str
    month_start: date
    month_end: date
    total_interest_receivable: float = 0.0  # net of taxes and fees
    total_interest_gross: float = 0.0
    total_taxes: float = 0.0
    total_fees: float = 0.0
    total_principal_due: float = 0.0
    total_cash_inflow: float = 0.0
    total_investor_payouts: float = 0.0
    excluded_investor_payouts: float = 0.0
    net_cashflow: float = 0.0
    interest_payments: List[InterestPaymentItem] = field(default_factory=list)
    loan_maturities: List[LoanMaturityItem] = field(default_factory=list)
    investor_payouts: List[InvestorPayoutItem] = field(default_factory=list)


@dataclass
class PaymentAnalysis:
    """Collection statistics across the projected loans"""

    total_loans: int
    loans_with_payments: int
    fully_paid_loans: int
    partially_paid_loans: int
    unpaid_loans: int
    total_actual_payments_gross: float
    total_actual_payments_net: float
    total_expected_payments: float
    total_taxes_paid: float
    total_fees_paid: float
    collection_rate_gross: float
    collection_rate_net: float


@dataclass
class CashflowSummary:
    """Aggregate totals across all projected months"""

    total_inflows: float
    total_outflows: float
    total_net_cashflow: float
    total_investors: int
    payment_analysis: PaymentAnalysis


@dataclass
class CashflowProjection:
    """Output of the monthly cashflow projector"""

    months: List[MonthlyCashflow]
    summary: CashflowSummary


# Loan book

@dataclass
class LoanEvaluation:
    """A loan with its expected interest and both status classifications"""

    loan: Loan
    expected_interest: UpfrontInterestResult
    interest_status: InterestStatus
    loan_status: LoanStatus
    days_to_maturity: int
    days_to_start: int
    payment_completion: int
    is_special_project: bool


@dataclass
class SpecialProjectSummary:
    total: int = 0
    overdue: int = 0
    overdue_extension: int = 0
    other: int = 0


@dataclass
class BookSummary:
    """Counts and totals across an evaluated loan book"""

    total_loans: int
    loan_status_counts: Dict[str, int]
    interest_status_counts: Dict[str, int]
    special_projects: SpecialProjectSummary
    total_loan_value: float
    total_expected_interest: float
    total_interest_collected: float
    collection_rate: int


# Reminders

@dataclass
class BorrowerReminder:
    """Upcoming upfront-interest or principal payment from a borrower"""

    loan_id: int
    project_title: str
    loan_amount: float
    due_date: date
    days_until_due: int
    urgency_level: str  # "urgent" | "upcoming"
    reminder_type: str  # "upfront_interest" | "principal_payment"
    status: str
    expected_interest: Optional[float] = None
    loan_status: Optional[LoanStatus] = None
    is_special_project: bool = False


@dataclass
class InvestorPayoutReminder:
    """One scheduled payout to an investor"""

    funding_id: int
    investor_id: int
    investor_name: str
    investor_email: Optional[str]
    investor_phone: Optional[str]
    investment_amount: float
    annual_rate: float
    payment_amount: float
    scheduled_date: date
    days_until_payment: int
    last_payment_date: Optional[date]
    payment_count: int
    urgency_level: str
    reminder_key: str
    is_paid: bool = False
    is_ignored: bool = False
    marked_paid_at: Optional[datetime] = None
    marked_ignored_at: Optional[datetime] = None
    marked_by_user: Optional[str] = None
    is_prorated: bool = False
    prorated_days: Optional[int] = None


@dataclass
class ProjectPayoutReminders:
    """Investor payouts grouped under the project that funds them"""

    project_id: Optional[int]
    project_title: Optional[str]
    loan_id: int
    loan_amount: float
    total_investors: int = 0
    total_payment_amount: float = 0.0
    urgency_level: str = "upcoming"
    payments: List[InvestorPayoutReminder] = field(default_factory=list)


@dataclass
class BorrowerReminderSummary:
    urgent: int = 0
    upcoming: int = 0
    overdue: int = 0
    overdue_extension: int = 0
    upfront_interest: int = 0
    principal_payments: int = 0
    special_projects: int = 0


@dataclass
class InvestorReminderSummary:
    total_projects: int = 0
    total_investors: int = 0
    total_payment_amount: float = 0.0
    urgent_projects: int = 0
    urgent_payments: int = 0
    unpaid_payments: int = 0
    paid_payments: int = 0
    ignored_payments: int = 0
    overdue_payments: int = 0
