"""POST /v1/reminders - Borrower and investor payment reminders"""

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from loanbook.api.dependencies import get_book_policy, get_request_id, get_today
from loanbook.api.v1.schemas import (
    BorrowerReminderResponse,
    InvestorReminderRequest,
    InvestorReminderResponse,
    LoanBookRequest,
)
from loanbook.config import settings
from loanbook.domain.exceptions import InvalidReminderKeyError
from loanbook.domain.models import BookPolicy
from loanbook.domain.portfolio import select_active_book
from loanbook.domain.reminders import build_borrower_reminders, build_investor_reminders
from loanbook.infrastructure.observability.metrics import record_reminders

router = APIRouter()


@router.post("/reminders", response_model=BorrowerReminderResponse)
def borrower_reminders(
    request_body: LoanBookRequest,
    today: date = Depends(get_today),
    policy: BookPolicy = Depends(get_book_policy),
):
    """Upcoming upfront interest and principal payments from borrowers"""
    loans = select_active_book([loan.to_domain() for loan in request_body.loans], today, policy)

    reminders, summary = build_borrower_reminders(
        loans, today, policy, window_days=settings.borrower_reminder_days
    )
    record_reminders("borrower", len(reminders))

    return BorrowerReminderResponse(as_of=today, data=reminders, summary=summary)


@router.post("/reminders/investors", response_model=InvestorReminderResponse)
def investor_reminders(
    request_body: InvestorReminderRequest,
    request: Request,
    days: int = Query(settings.investor_reminder_days, ge=1, le=366, description="Days ahead"),
    today: date = Depends(get_today),
    policy: BookPolicy = Depends(get_book_policy),
):
    """
    Investor payouts due in the next `days` days, grouped by project.

    Returns:
        Projects with their upcoming payouts, each annotated with paid/ignored flags
    """
    request_id = get_request_id(request)

    try:
        flags = [flag.to_domain() for flag in request_body.flags]
    except InvalidReminderKeyError as e:
        logging.warning(f"Invalid reminder key: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    loans = select_active_book([loan.to_domain() for loan in request_body.loans], today, policy)
    fundings = [f.to_domain() for f in request_body.fundings if f.annual_rate > 0]

    groups, summary = build_investor_reminders(
        loans,
        fundings,
        flags,
        today,
        days_ahead=days,
        flag_visibility_days=settings.reminder_flag_visibility_days,
    )
    record_reminders("investor", sum(len(g.payments) for g in groups))

    return InvestorReminderResponse(as_of=today, data=groups, summary=summary)
