"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from banking_service.infrastructure.database.repositories import (
    AccountRepository,
    LedgerRepository,
    LoanRepository,
    NotificationRepository,
)
from banking_service.infrastructure.database.session import get_db


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_current_user_id(x_user_id: str = Header(..., min_length=1)) -> str:
    """Authenticated caller, as asserted by the upstream identity provider"""
    return x_user_id


def get_account_store(db: Session = Depends(get_db)) -> AccountRepository:
    return AccountRepository(db)


def get_ledger_store(db: Session = Depends(get_db)) -> LedgerRepository:
    return LedgerRepository(db)


def get_loan_store(db: Session = Depends(get_db)) -> LoanRepository:
    return LoanRepository(db)


def get_notification_store(db: Session = Depends(get_db)) -> NotificationRepository:
    return NotificationRepository(db)
