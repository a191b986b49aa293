"""POST /v1/loans - Evaluate the loan book"""

import logging
import time
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from loanbook.api.dependencies import get_book_policy, get_request_id, get_today
from loanbook.api.v1.schemas import LoanBookRequest, LoanBookResponse, LoanView
from loanbook.domain.models import BookPolicy
from loanbook.domain.portfolio import evaluate_book, select_active_book, summarize_book
from loanbook.infrastructure.observability.logging import log_book_evaluation
from loanbook.infrastructure.observability.metrics import record_loan_statuses

router = APIRouter()


@router.post("/loans", response_model=LoanBookResponse)
def evaluate_loans(
    request_body: LoanBookRequest,
    request: Request,
    active_only: bool = Query(True, description="Restrict to the active book"),
    today: date = Depends(get_today),
    policy: BookPolicy = Depends(get_book_policy),
):
    """
    Expected upfront interest, interest status and loan status for each loan.

    Returns:
        Loans ordered by repayment date, with a book-level summary
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        loans = [loan.to_domain() for loan in request_body.loans]
        if active_only:
            loans = select_active_book(loans, today, policy)

        evaluations = evaluate_book(loans, today, policy)
        summary = summarize_book(evaluations)

    except Exception as e:
        logging.error(f"Loan book evaluation failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    record_loan_statuses(e.loan_status for e in evaluations)
    log_book_evaluation(
        request_id,
        today.isoformat(),
        len(evaluations),
        summary.loan_status_counts,
        summary.interest_status_counts,
        (time.time() - start_time) * 1000,
    )

    return LoanBookResponse(
        as_of=today,
        total=len(evaluations),
        data=[LoanView.from_evaluation(e) for e in evaluations],
        summary=summary,
    )
