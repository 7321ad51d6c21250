"""Unit tests for loan requests and status changes"""

import logging
import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from banking_service.domain.amortization import simulate_loan
from banking_service.domain.exceptions import (
    InvalidRate,
    InvalidStatusTransition,
    InvalidTerm,
    LoanNotFoundError,
)
from banking_service.domain.loans import get_user_loan, loan_history, request_loan, set_loan_status
from banking_service.domain.models import LoanStatus, NotificationType

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def pending_loan(loan_store, notification_sink):
    loan = request_loan(
        loan_store, notification_sink, "alice", 10000, 12, 12, purpose="Car", now=NOW
    )
    notification_sink.sent.clear()
    return loan


def test_request_freezes_simulated_terms(loan_store, notification_sink):
    loan = request_loan(
        loan_store, notification_sink, "alice", "10000", "12", 12, purpose="Car", notes="Used", now=NOW
    )
    terms = simulate_loan(10000, 12, 12)

    assert loan.status == LoanStatus.PENDING
    assert loan.monthly_payment == terms.monthly_payment == Decimal("888.49")
    assert loan.total_to_pay == terms.total_to_pay == Decimal("10661.85")
    assert loan.purpose == "Car"
    assert loan.notes == "Used"
    assert loan.created_at == NOW
    assert loan.processed_at is None
    assert loan_store.get_loan(loan.id) == loan


def test_request_notifies_owner(loan_store, notification_sink):
    loan = request_loan(loan_store, notification_sink, "alice", 2500, 10, 6)

    assert len(notification_sink.sent) == 1
    notification = notification_sink.sent[0]
    assert notification.user_id == "alice"
    assert notification.type == NotificationType.GENERAL
    assert notification.related_loan_id == loan.id
    assert "$2,500.00" in notification.message


@pytest.mark.parametrize(
    "rate,term,error",
    [(-1, 12, InvalidRate), (12, 0, InvalidTerm)],
)
def test_invalid_request_stores_nothing(loan_store, notification_sink, rate, term, error):
    with pytest.raises(error):
        request_loan(loan_store, notification_sink, "alice", 1000, rate, term)

    assert loan_store.loans == {}
    assert notification_sink.sent == []


def test_request_survives_notification_failure(loan_store, failing_sink):
    loan = request_loan(loan_store, failing_sink, "alice", 1000, 5, 12)

    assert failing_sink.attempts == 1
    assert loan_store.get_loan(loan.id) is not None


def test_approve_sets_processed_at_and_notifies(loan_store, notification_sink, pending_loan):
    later = NOW + timedelta(days=1)
    loan = set_loan_status(loan_store, notification_sink, pending_loan.id, LoanStatus.APPROVED, now=later)

    assert loan.status == LoanStatus.APPROVED
    assert loan.processed_at == later
    assert loan.updated_at == later
    assert loan.rejection_reason is None

    [notification] = notification_sink.sent
    assert notification.type == NotificationType.LOAN_APPROVED
    assert notification.user_id == "alice"
    assert notification.related_loan_id == pending_loan.id


def test_reject_records_reason(loan_store, notification_sink, pending_loan):
    loan = set_loan_status(
        loan_store, notification_sink, pending_loan.id, "REJECTED", rejection_reason="Income too low"
    )

    assert loan.status == LoanStatus.REJECTED
    assert loan.rejection_reason == "Income too low"

    [notification] = notification_sink.sent
    assert notification.type == NotificationType.LOAN_REJECTED
    assert notification.message.endswith("Income too low")


def test_reason_ignored_when_approving(loan_store, notification_sink, pending_loan):
    loan = set_loan_status(
        loan_store, notification_sink, pending_loan.id, LoanStatus.APPROVED, rejection_reason="n/a"
    )

    assert loan.rejection_reason is None


@pytest.mark.parametrize(
    "status",
    [LoanStatus.ACTIVE, LoanStatus.COMPLETED, LoanStatus.CANCELLED, LoanStatus.PENDING],
)
def test_pending_loan_only_approved_or_rejected(loan_store, notification_sink, pending_loan, status):
    with pytest.raises(InvalidStatusTransition):
        set_loan_status(loan_store, notification_sink, pending_loan.id, status)

    assert loan_store.get_loan(pending_loan.id).status == LoanStatus.PENDING
    assert notification_sink.sent == []


def test_later_transitions_are_not_validated(loan_store, notification_sink, pending_loan):
    set_loan_status(loan_store, notification_sink, pending_loan.id, LoanStatus.APPROVED)
    set_loan_status(loan_store, notification_sink, pending_loan.id, LoanStatus.ACTIVE)
    loan = set_loan_status(loan_store, notification_sink, pending_loan.id, LoanStatus.COMPLETED)

    assert loan.status == LoanStatus.COMPLETED
    assert [n.type for n in notification_sink.sent] == [
        NotificationType.LOAN_APPROVED,
        NotificationType.GENERAL,
        NotificationType.GENERAL,
    ]


def test_unknown_loan(loan_store, notification_sink):
    with pytest.raises(LoanNotFoundError):
        set_loan_status(loan_store, notification_sink, "missing", LoanStatus.APPROVED)


def test_status_change_survives_notification_failure(loan_store, failing_sink, pending_loan, caplog):
    with caplog.at_level(logging.WARNING, logger="banking_service.domain.notifications"):
        loan = set_loan_status(loan_store, failing_sink, pending_loan.id, LoanStatus.APPROVED)

    assert loan.status == LoanStatus.APPROVED
    assert loan_store.get_loan(pending_loan.id).status == LoanStatus.APPROVED
    assert failing_sink.attempts == 1
    assert "Notification delivery failed" in caplog.text


def test_history_is_per_user_newest_first(loan_store, notification_sink):
    first = request_loan(loan_store, notification_sink, "alice", 1000, 5, 12, now=NOW)
    second = request_loan(loan_store, notification_sink, "alice", 2000, 5, 12, now=NOW + timedelta(hours=1))
    request_loan(loan_store, notification_sink, "bob", 3000, 5, 12, now=NOW)
    set_loan_status(loan_store, notification_sink, first.id, LoanStatus.REJECTED)

    assert [loan.id for loan in loan_history(loan_store, "alice")] == [second.id, first.id]
    assert [loan.id for loan in loan_history(loan_store, "alice", status=LoanStatus.REJECTED)] == [first.id]


def test_user_cannot_read_someone_elses_loan(loan_store, pending_loan):
    assert get_user_loan(loan_store, "alice", pending_loan.id).id == pending_loan.id

    with pytest.raises(LoanNotFoundError):
        get_user_loan(loan_store, "bob", pending_loan.id)
