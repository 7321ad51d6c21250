"""Loan requests and administrative status changes"""

import logging
import uuid
from datetime import datetime
from typing import List, Optional

from banking_service.domain.amortization import simulate_loan
from banking_service.domain.exceptions import InvalidStatusTransition, LoanNotFoundError
from banking_service.domain.models import LoanRequest, LoanStatus
from banking_service.domain.notifications import (
    loan_received_notification,
    loan_status_notification,
    send_notification,
)
from banking_service.domain.ports import LoanStore, NotificationSink
from banking_service.utils.date_utils import utc_now
from banking_service.utils.money import Numeric, to_decimal

logger = logging.getLogger(__name__)

# Only transition with a defined rule; every other change is a manual admin action
PENDING_TARGETS = frozenset({LoanStatus.APPROVED, LoanStatus.REJECTED})


def request_loan(
    loans: LoanStore,
    notifications: NotificationSink,
    user_id: str,
    amount: Numeric,
    annual_rate: Numeric,
    term_months: int,
    purpose: str = "",
    notes: Optional[str] = None,
    now: Optional[datetime] = None,
) -> LoanRequest:
    """
    Persist a PENDING loan request with its terms frozen from the simulation.

    Raises the simulation's ValidationError for bad input; nothing is stored
    in that case. The owner is notified best-effort.
    """
    terms = simulate_loan(amount, annual_rate, term_months)

    loan = loans.create_loan(
        LoanRequest(
            id=str(uuid.uuid4()),
            user_id=user_id,
            amount=to_decimal(amount),
            annual_rate=to_decimal(annual_rate),
            term_months=term_months,
            monthly_payment=terms.monthly_payment,
            total_to_pay=terms.total_to_pay,
            status=LoanStatus.PENDING,
            purpose=purpose,
            notes=notes,
            created_at=now or utc_now(),
        )
    )
    logger.info("Loan requested", extra={"loan_id": loan.id, "user_id": user_id})

    send_notification(notifications, loan_received_notification(loan, now))
    return loan


def set_loan_status(
    loans: LoanStore,
    notifications: NotificationSink,
    loan_id: str,
    new_status: LoanStatus,
    rejection_reason: Optional[str] = None,
    now: Optional[datetime] = None,
) -> LoanRequest:
    """
    Record an administrative decision on a loan and notify its owner.

    A PENDING loan can only move to APPROVED or REJECTED. Transitions out of
    other statuses are not validated. rejection_reason is kept only when
    rejecting. Notification failures never fail the status change.
    """
    new_status = LoanStatus(new_status)

    loan = loans.get_loan(loan_id)
    if loan is None:
        raise LoanNotFoundError(f"Loan {loan_id} not found")

    if loan.status == LoanStatus.PENDING and new_status not in PENDING_TARGETS:
        raise InvalidStatusTransition(
            f"A pending loan can only be approved or rejected, not set to {new_status.value}"
        )

    updated = loans.update_status(
        loan_id,
        new_status,
        processed_at=now or utc_now(),
        rejection_reason=rejection_reason if new_status == LoanStatus.REJECTED else None,
    )
    if updated is None:
        raise LoanNotFoundError(f"Loan {loan_id} not found")

    logger.info(
        "Loan status changed",
        extra={"loan_id": loan_id, "from_status": loan.status.value, "to_status": new_status.value},
    )

    send_notification(notifications, loan_status_notification(updated, now))
    return updated


def get_user_loan(loans: LoanStore, user_id: str, loan_id: str) -> LoanRequest:
    """Fetch a loan owned by user_id; other users' loans look missing"""
    loan = loans.get_loan(loan_id)
    if loan is None or loan.user_id != user_id:
        raise LoanNotFoundError(f"Loan {loan_id} not found")
    return loan


def loan_history(
    loans: LoanStore,
    user_id: str,
    status: Optional[LoanStatus] = None,
    limit: Optional[int] = None,
) -> List[LoanRequest]:
    """User's loans, newest first, optionally filtered by status"""
    return loans.list_loans(user_id, status=status, limit=limit)
