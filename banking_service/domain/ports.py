"""Persistence collaborators consumed by the domain layer.

Domain operations receive these as arguments, so the SQLAlchemy stores in
infrastructure/database can be swapped for in-memory fakes in tests.
Not-found lookups return None; storage failures raise StorageError.
"""

from datetime import datetime
from typing import List, Optional, Protocol, Sequence

from banking_service.domain.models import (
    Account,
    AccountWrite,
    LedgerEntry,
    LoanRequest,
    LoanStatus,
    Notification,
    TransactionType,
)


class AccountStore(Protocol):
    def get_account(self, user_id: str) -> Optional[Account]: ...

    def get_account_by_number(self, account_number: str) -> Optional[Account]: ...

    def account_number_exists(self, account_number: str) -> bool: ...

    def create_account(self, account: Account) -> Account: ...

    def atomic_batch(self, writes: Sequence[AccountWrite]) -> None:
        """Apply all writes or none. Raises ConcurrentUpdateError on a version mismatch."""
        ...


class LedgerStore(Protocol):
    def list_entries(
        self,
        user_id: str,
        type: Optional[TransactionType] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        category: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[LedgerEntry]: ...

    def get_entry(self, entry_id: str) -> Optional[LedgerEntry]: ...


class LoanStore(Protocol):
    def create_loan(self, loan: LoanRequest) -> LoanRequest: ...

    def get_loan(self, loan_id: str) -> Optional[LoanRequest]: ...

    def list_loans(
        self,
        user_id: str,
        status: Optional[LoanStatus] = None,
        limit: Optional[int] = None,
    ) -> List[LoanRequest]: ...

    def update_status(
        self,
        loan_id: str,
        status: LoanStatus,
        processed_at: datetime,
        rejection_reason: Optional[str] = None,
    ) -> Optional[LoanRequest]: ...


class NotificationSink(Protocol):
    def create(self, notification: Notification) -> str: ...


class NotificationStore(NotificationSink, Protocol):
    def list_notifications(self, user_id: str, unread_only: bool = False) -> List[Notification]: ...

    def get_notification(self, notification_id: str) -> Optional[Notification]: ...

    def mark_read(self, notification_id: str) -> None: ...

    def mark_all_read(self, user_id: str) -> int: ...

    def delete(self, notification_id: str) -> None: ...
