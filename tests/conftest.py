"""Pytest fixtures for testing"""

import pytest
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, Generator, List, Optional
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from banking_service.api.main import create_app
from banking_service.domain.exceptions import AccountNotFoundError, ConcurrentUpdateError, StorageError
from banking_service.domain.models import (
    Account,
    LedgerEntry,
    LoanRequest,
    LoanStatus,
    Notification,
    UpdateAccountBalance,
)
from banking_service.infrastructure.database.models import Base
from banking_service.infrastructure.database.repositories import AccountRepository
from banking_service.infrastructure.database.session import get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


# In-memory stores for domain tests


class InMemoryAccountStore:
    """AccountStore fake; atomic_batch stages every write before publishing any"""

    def __init__(self):
        self.accounts: Dict[str, Account] = {}
        self.entries: List[LedgerEntry] = []
        self.fail_commit = False
        self.batch_count = 0

    def add(self, user_id: str, account_number: str, balance: str) -> Account:
        account = Account(
            user_id=user_id,
            balance=Decimal(balance),
            currency="USD",
            account_number=account_number,
            account_type="SAVINGS",
            created_at=NOW,
            updated_at=NOW,
        )
        self.accounts[user_id] = account
        return replace(account)

    def get_account(self, user_id: str) -> Optional[Account]:
        account = self.accounts.get(user_id)
        return replace(account) if account else None

    def get_account_by_number(self, account_number: str) -> Optional[Account]:
        for account in self.accounts.values():
            if account.account_number == account_number:
                return replace(account)
        return None

    def account_number_exists(self, account_number: str) -> bool:
        return self.get_account_by_number(account_number) is not None

    def create_account(self, account: Account) -> Account:
        self.accounts[account.user_id] = replace(account)
        return replace(account)

    def atomic_batch(self, writes) -> None:
        if self.fail_commit:
            raise StorageError("Storage unavailable")

        staged = {user_id: replace(account) for user_id, account in self.accounts.items()}
        new_entries = []
        for write in writes:
            if isinstance(write, UpdateAccountBalance):
                account = staged.get(write.user_id)
                if account is None:
                    raise AccountNotFoundError(write.user_id)
                if account.version != write.expected_version:
                    raise ConcurrentUpdateError("Account changed since it was read")
                account.balance = write.balance
                account.updated_at = write.updated_at
                account.version += 1
            else:
                new_entries.append(write.entry)

        self.accounts = staged
        self.entries.extend(new_entries)
        self.batch_count += 1

    def balance(self, user_id: str) -> Decimal:
        return self.accounts[user_id].balance


class InMemoryLoanStore:
    def __init__(self):
        self.loans: Dict[str, LoanRequest] = {}

    def create_loan(self, loan: LoanRequest) -> LoanRequest:
        self.loans[loan.id] = replace(loan)
        return replace(loan)

    def get_loan(self, loan_id: str) -> Optional[LoanRequest]:
        loan = self.loans.get(loan_id)
        return replace(loan) if loan else None

    def list_loans(self, user_id, status=None, limit=None) -> List[LoanRequest]:
        loans = [
            replace(loan)
            for loan in self.loans.values()
            if loan.user_id == user_id and (status is None or loan.status == status)
        ]
        loans.sort(key=lambda loan: loan.created_at, reverse=True)
        return loans[:limit] if limit else loans

    def update_status(self, loan_id, status, processed_at, rejection_reason=None) -> Optional[LoanRequest]:
        loan = self.loans.get(loan_id)
        if loan is None:
            return None
        loan.status = LoanStatus(status)
        loan.processed_at = processed_at
        loan.updated_at = processed_at
        if rejection_reason is not None:
            loan.rejection_reason = rejection_reason
        return replace(loan)


class InMemoryNotificationSink:
    def __init__(self):
        self.sent: List[Notification] = []

    def create(self, notification: Notification) -> str:
        self.sent.append(notification)
        return notification.id


class FailingNotificationSink:
    def __init__(self):
        self.attempts = 0

    def create(self, notification: Notification) -> str:
        self.attempts += 1
        raise StorageError("Notification store unavailable")


@pytest.fixture
def account_store() -> InMemoryAccountStore:
    return InMemoryAccountStore()


@pytest.fixture
def loan_store() -> InMemoryLoanStore:
    return InMemoryLoanStore()


@pytest.fixture
def notification_sink() -> InMemoryNotificationSink:
    return InMemoryNotificationSink()


@pytest.fixture
def failing_sink() -> FailingNotificationSink:
    return FailingNotificationSink()


# Database and HTTP fixtures


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory():
    """Opens extra sessions on the test database, e.g. to act as a concurrent writer"""
    return TestingSessionLocal


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def seeded_accounts(db: Session) -> Dict[str, Account]:
    """alice: 500.00 on 1000000001, bob: 200.00 on 2000000002"""
    repo = AccountRepository(db)
    accounts = {}
    for user_id, number, balance in [("alice", "1000000001", "500.00"), ("bob", "2000000002", "200.00")]:
        accounts[user_id] = repo.create_account(
            Account(
                user_id=user_id,
                balance=Decimal(balance),
                currency="USD",
                account_number=number,
                account_type="SAVINGS",
                created_at=NOW,
                updated_at=NOW,
            )
        )
    return accounts
