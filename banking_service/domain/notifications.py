"""Notification messages and best-effort delivery"""

import logging
import uuid
from datetime import datetime
from typing import Optional

from banking_service.domain.exceptions import NotFoundError
from banking_service.domain.models import LoanRequest, LoanStatus, Notification, NotificationType
from banking_service.domain.ports import NotificationSink, NotificationStore
from banking_service.utils.date_utils import utc_now
from banking_service.utils.money import format_money

logger = logging.getLogger(__name__)


def loan_received_notification(loan: LoanRequest, now: Optional[datetime] = None) -> Notification:
    return _loan_notification(
        loan,
        NotificationType.GENERAL,
        "Loan Request Received",
        f"Your loan request for {format_money(loan.amount)} has been received and is under review.",
        now,
    )


def loan_status_notification(loan: LoanRequest, now: Optional[datetime] = None) -> Notification:
    """Message for the owner after an administrative status change"""
    if loan.status == LoanStatus.APPROVED:
        return _loan_notification(
            loan,
            NotificationType.LOAN_APPROVED,
            "Loan Approved!",
            f"Your loan for {format_money(loan.amount)} has been approved.",
            now,
        )
    if loan.status == LoanStatus.REJECTED:
        message = "Your loan request has been rejected."
        if loan.rejection_reason:
            message = f"{message} {loan.rejection_reason}"
        return _loan_notification(loan, NotificationType.LOAN_REJECTED, "Loan Rejected", message, now)

    return _loan_notification(
        loan,
        NotificationType.GENERAL,
        "Loan Status Updated",
        f"Your loan for {format_money(loan.amount)} is now {loan.status.value}.",
        now,
    )


def _loan_notification(
    loan: LoanRequest,
    type: NotificationType,
    title: str,
    message: str,
    now: Optional[datetime],
) -> Notification:
    return Notification(
        id=str(uuid.uuid4()),
        user_id=loan.user_id,
        type=type,
        title=title,
        message=message,
        timestamp=now or utc_now(),
        related_loan_id=loan.id,
    )


def send_notification(sink: NotificationSink, notification: Notification) -> Optional[str]:
    """
    Deliver a notification without affecting the caller's outcome.

    Failures are logged and swallowed; returns the notification id, or None
    when delivery failed.
    """
    try:
        return sink.create(notification)
    except Exception:
        logger.warning(
            "Notification delivery failed",
            exc_info=True,
            extra={"user_id": notification.user_id, "notification_type": notification.type.value},
        )
        return None


def get_user_notification(store: NotificationStore, user_id: str, notification_id: str) -> Notification:
    notification = store.get_notification(notification_id)
    if notification is None or notification.user_id != user_id:
        raise NotFoundError(f"Notification {notification_id} not found")
    return notification
