"""POST /v1/cashflow/monthly - Monthly cashflow projection"""

import logging
import time
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from loanbook.api.dependencies import get_book_policy, get_request_id, get_today
from loanbook.api.v1.schemas import CashflowRequest, CashflowResponse
from loanbook.config import settings
from loanbook.domain.cashflow import project_cashflow
from loanbook.domain.models import BookPolicy
from loanbook.domain.portfolio import select_active_book
from loanbook.infrastructure.observability.logging import log_projection
from loanbook.infrastructure.observability.metrics import record_projection

router = APIRouter()


@router.post("/cashflow/monthly", response_model=CashflowResponse)
def monthly_cashflow(
    request_body: CashflowRequest,
    request: Request,
    months: int = Query(settings.cashflow_horizon_months, ge=1, le=120, description="Months to project"),
    today: date = Depends(get_today),
    policy: BookPolicy = Depends(get_book_policy),
):
    """
    Project borrower income, principal repayments and investor payouts month by month.

    Flow:
    1. Restrict loans to the active book
    2. Drop fundings that carry no income rate
    3. Project each month from the current one
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        loans = select_active_book([loan.to_domain() for loan in request_body.loans], today, policy)
        fundings = [f.to_domain() for f in request_body.fundings if f.annual_rate > 0]

        projection = project_cashflow(loans, fundings, months, today, policy)

    except Exception as e:
        logging.error(f"Cashflow projection failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    record_projection(payout for month in projection.months for payout in month.investor_payouts)
    log_projection(
        request_id,
        today.isoformat(),
        months,
        len(loans),
        projection.summary.total_net_cashflow,
        projection.summary.payment_analysis.collection_rate_net,
        (time.time() - start_time) * 1000,
    )

    return CashflowResponse(as_of=today, data=projection.months, summary=projection.summary)
