"""Loan simulation, requests, history and administrative decisions"""

import logging
import time
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request

from banking_service.api.dependencies import (
    get_current_user_id,
    get_loan_store,
    get_notification_store,
    get_request_id,
)
from banking_service.api.errors import http_error
from banking_service.api.v1.schemas import (
    LoanCreateRequest,
    LoanResponse,
    LoanStatusUpdate,
    LoanTermsResponse,
    ScheduleResponse,
    ScheduleRowSchema,
    SimulationRequest,
)
from banking_service.config import settings
from banking_service.domain.amortization import build_amortization_schedule, simulate_loan
from banking_service.domain.exceptions import (
    InvalidStatusTransition,
    LoanNotFoundError,
    StorageError,
    ValidationError,
)
from banking_service.domain.loans import get_user_loan, loan_history, request_loan, set_loan_status
from banking_service.domain.models import LoanStatus
from banking_service.infrastructure.database.repositories import LoanRepository, NotificationRepository
from banking_service.infrastructure.observability.logging import log_loan_status_change
from banking_service.infrastructure.observability.metrics import loan_request_counter, loan_status_counter

router = APIRouter()


@router.post("/loans/simulate", response_model=LoanTermsResponse)
def simulate(body: SimulationRequest):
    """
    Compute installment and totals for a prospective loan.

    Pure computation: nothing is stored and no identity is required.
    """
    try:
        terms = simulate_loan(body.amount, body.annual_rate, body.term_months)
    except ValidationError as e:
        raise http_error(422, e)

    return LoanTermsResponse.model_validate(terms)


@router.post("/loans/schedule", response_model=ScheduleResponse)
def schedule(body: SimulationRequest):
    """Month-by-month interest/principal split for a prospective loan"""
    try:
        terms = simulate_loan(body.amount, body.annual_rate, body.term_months)
        rows = build_amortization_schedule(body.amount, body.annual_rate, body.term_months)
    except ValidationError as e:
        raise http_error(422, e)

    return ScheduleResponse(
        terms=LoanTermsResponse.model_validate(terms),
        schedule=[ScheduleRowSchema.model_validate(row) for row in rows],
    )


@router.post("/loans", response_model=LoanResponse, status_code=201)
def create_loan_request(
    body: LoanCreateRequest,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    loans: LoanRepository = Depends(get_loan_store),
    notifications: NotificationRepository = Depends(get_notification_store),
):
    """
    Submit a loan request.

    Terms are computed by the same engine as /loans/simulate and frozen on
    the stored request, which starts as PENDING.
    """
    request_id = get_request_id(request)

    try:
        loan = request_loan(
            loans,
            notifications,
            user_id=user_id,
            amount=body.amount,
            annual_rate=body.annual_rate,
            term_months=body.term_months,
            purpose=body.purpose,
            notes=body.notes,
        )
    except ValidationError as e:
        raise http_error(422, e)
    except StorageError as e:
        logging.error(f"Storage error: {e}", extra={"request_id": request_id})
        raise http_error(503, e)

    loan_request_counter.inc()
    return LoanResponse.model_validate(loan)


@router.get("/loans", response_model=List[LoanResponse])
def list_loans(
    status: Optional[LoanStatus] = Query(None, description="Only loans in this status"),
    user_id: str = Depends(get_current_user_id),
    loans: LoanRepository = Depends(get_loan_store),
):
    """Caller's loan history, newest first"""
    try:
        history = loan_history(loans, user_id, status=status, limit=settings.history_limit)
    except StorageError as e:
        raise http_error(503, e)

    return [LoanResponse.model_validate(loan) for loan in history]


@router.get("/loans/{loan_id}", response_model=LoanResponse)
def get_loan(
    loan_id: str,
    user_id: str = Depends(get_current_user_id),
    loans: LoanRepository = Depends(get_loan_store),
):
    try:
        loan = get_user_loan(loans, user_id, loan_id)
    except LoanNotFoundError as e:
        raise http_error(404, e)
    except StorageError as e:
        raise http_error(503, e)

    return LoanResponse.model_validate(loan)


@router.patch("/loans/{loan_id}/status", response_model=LoanResponse)
def update_loan_status(
    loan_id: str,
    body: LoanStatusUpdate,
    request: Request,
    loans: LoanRepository = Depends(get_loan_store),
    notifications: NotificationRepository = Depends(get_notification_store),
):
    """
    Administrative approval/rejection of a loan.

    The owner is notified; a failed notification does not fail the update.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        loan = set_loan_status(
            loans,
            notifications,
            loan_id=loan_id,
            new_status=body.status,
            rejection_reason=body.rejection_reason,
        )
    except LoanNotFoundError as e:
        raise http_error(404, e)
    except InvalidStatusTransition as e:
        raise http_error(409, e)
    except StorageError as e:
        logging.error(f"Storage error: {e}", extra={"request_id": request_id})
        raise http_error(503, e)

    duration_ms = (time.time() - start_time) * 1000
    loan_status_counter.labels(status=loan.status.value).inc()
    log_loan_status_change(request_id, loan_id, loan.status.value, duration_ms)

    return LoanResponse.model_validate(loan)
