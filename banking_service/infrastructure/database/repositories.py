"""Data access layer implementing the domain stores on SQLAlchemy.

Each write method is its own unit of work and commits before returning,
mirroring the one-write-per-call semantics of a document store.
atomic_batch is the only multi-record write.
"""

from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from banking_service.domain.exceptions import (
    AccountNotFoundError,
    ConcurrentUpdateError,
    DomainException,
    NotFoundError,
    StorageError,
)
from banking_service.domain.models import (
    Account,
    AccountWrite,
    AppendLedgerEntry,
    LedgerEntry,
    LoanRequest,
    LoanStatus,
    Notification,
    NotificationType,
    TransactionType,
    UpdateAccountBalance,
)
from banking_service.infrastructure.database.models import (
    AccountRecord,
    LedgerEntryRecord,
    LoanRecord,
    NotificationRecord,
)
from banking_service.infrastructure.observability.metrics import (
    notification_failure_counter,
    storage_failure_counter,
)


class BaseRepository:
    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def storage_errors(self, operation: str) -> Iterator[None]:
        """Roll back and re-raise database failures as StorageError"""
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            storage_failure_counter.labels(operation=operation).inc()
            raise StorageError(f"Storage failure during {operation}") from e


class AccountRepository(BaseRepository):
    """Accounts plus the atomic transfer batch"""

    def get_account(self, user_id: str) -> Optional[Account]:
        with self.storage_errors("get_account"):
            record = self.db.get(AccountRecord, user_id)
            return _to_account(record) if record else None

    def get_account_by_number(self, account_number: str) -> Optional[Account]:
        with self.storage_errors("get_account_by_number"):
            record = (
                self.db.query(AccountRecord)
                .filter(AccountRecord.account_number == account_number)
                .first()
            )
            return _to_account(record) if record else None

    def account_number_exists(self, account_number: str) -> bool:
        with self.storage_errors("account_number_exists"):
            query = self.db.query(AccountRecord).filter(AccountRecord.account_number == account_number)
            return bool(self.db.query(query.exists()).scalar())

    def create_account(self, account: Account) -> Account:
        with self.storage_errors("create_account"):
            record = AccountRecord(
                user_id=account.user_id,
                balance=account.balance,
                currency=account.currency,
                account_number=account.account_number,
                account_type=account.account_type,
                created_at=account.created_at,
                updated_at=account.updated_at,
            )
            self.db.add(record)
            self.db.commit()
            return _to_account(record)

    def atomic_batch(self, writes: Sequence[AccountWrite]) -> None:
        """
        Apply balance updates and ledger appends in a single transaction.

        A balance update is rejected when the account's version no longer
        matches the one the caller validated against, whether the change is
        already visible in this session or only detected by the versioned
        UPDATE at flush time. Either way nothing is written.
        """
        try:
            for write in writes:
                if isinstance(write, UpdateAccountBalance):
                    record = self.db.get(AccountRecord, write.user_id)
                    if record is None:
                        raise AccountNotFoundError(f"Account for user {write.user_id} not found")
                    if record.version != write.expected_version:
                        raise ConcurrentUpdateError("Account changed since it was read, please retry")
                    record.balance = write.balance
                    record.updated_at = write.updated_at
                elif isinstance(write, AppendLedgerEntry):
                    self.db.add(_to_ledger_record(write.entry))
                else:
                    raise TypeError(f"Unsupported write: {write!r}")

            self.db.commit()

        except StaleDataError as e:
            self.db.rollback()
            storage_failure_counter.labels(operation="atomic_batch").inc()
            raise ConcurrentUpdateError("Account changed since it was read, please retry") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            storage_failure_counter.labels(operation="atomic_batch").inc()
            raise StorageError("Could not commit transfer") from e
        except (DomainException, TypeError):
            self.db.rollback()
            raise


class LedgerRepository(BaseRepository):
    """Read side of the transactions table; rows are only added by atomic_batch"""

    def list_entries(
        self,
        user_id: str,
        type: Optional[TransactionType] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        category: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[LedgerEntry]:
        with self.storage_errors("list_entries"):
            query = self.db.query(LedgerEntryRecord).filter(LedgerEntryRecord.user_id == user_id)

            if type is not None:
                query = query.filter(LedgerEntryRecord.type == TransactionType(type).value)
            if start is not None:
                query = query.filter(LedgerEntryRecord.timestamp >= start)
            if end is not None:
                query = query.filter(LedgerEntryRecord.timestamp <= end)
            if category is not None:
                query = query.filter(LedgerEntryRecord.category == category)

            query = query.order_by(LedgerEntryRecord.timestamp.desc())
            if limit is not None:
                query = query.limit(limit)

            return [_to_ledger_entry(record) for record in query.all()]

    def get_entry(self, entry_id: str) -> Optional[LedgerEntry]:
        with self.storage_errors("get_entry"):
            record = self.db.get(LedgerEntryRecord, entry_id)
            return _to_ledger_entry(record) if record else None


class LoanRepository(BaseRepository):
    """Repository for loan requests"""

    def create_loan(self, loan: LoanRequest) -> LoanRequest:
        with self.storage_errors("create_loan"):
            record = LoanRecord(
                id=loan.id,
                user_id=loan.user_id,
                amount=loan.amount,
                annual_rate=loan.annual_rate,
                term_months=loan.term_months,
                monthly_payment=loan.monthly_payment,
                total_to_pay=loan.total_to_pay,
                status=loan.status.value,
                purpose=loan.purpose,
                notes=loan.notes,
                created_at=loan.created_at,
            )
            self.db.add(record)
            self.db.commit()
            return _to_loan(record)

    def get_loan(self, loan_id: str) -> Optional[LoanRequest]:
        with self.storage_errors("get_loan"):
            record = self.db.get(LoanRecord, loan_id)
            return _to_loan(record) if record else None

    def list_loans(
        self,
        user_id: str,
        status: Optional[LoanStatus] = None,
        limit: Optional[int] = None,
    ) -> List[LoanRequest]:
        """Fetch a user's loans, newest first"""
        with self.storage_errors("list_loans"):
            query = self.db.query(LoanRecord).filter(LoanRecord.user_id == user_id)
            if status is not None:
                query = query.filter(LoanRecord.status == LoanStatus(status).value)

            query = query.order_by(LoanRecord.created_at.desc())
            if limit is not None:
                query = query.limit(limit)

            return [_to_loan(record) for record in query.all()]

    def update_status(
        self,
        loan_id: str,
        status: LoanStatus,
        processed_at: datetime,
        rejection_reason: Optional[str] = None,
    ) -> Optional[LoanRequest]:
        with self.storage_errors("update_loan_status"):
            record = self.db.get(LoanRecord, loan_id)
            if record is None:
                return None

            record.status = LoanStatus(status).value
            record.processed_at = processed_at
            record.updated_at = processed_at
            if rejection_reason is not None:
                record.rejection_reason = rejection_reason

            self.db.commit()
            return _to_loan(record)


class NotificationRepository(BaseRepository):
    """Repository for user notifications"""

    def create(self, notification: Notification) -> str:
        try:
            record = NotificationRecord(
                id=notification.id,
                user_id=notification.user_id,
                type=notification.type.value,
                title=notification.title,
                message=notification.message,
                timestamp=notification.timestamp,
                is_read=notification.is_read,
                related_loan_id=notification.related_loan_id,
                related_transaction_id=notification.related_transaction_id,
            )
            self.db.add(record)
            self.db.commit()
            return record.id
        except SQLAlchemyError as e:
            self.db.rollback()
            notification_failure_counter.inc()
            raise StorageError("Could not store notification") from e

    def list_notifications(self, user_id: str, unread_only: bool = False) -> List[Notification]:
        with self.storage_errors("list_notifications"):
            query = self.db.query(NotificationRecord).filter(NotificationRecord.user_id == user_id)
            if unread_only:
                query = query.filter(NotificationRecord.is_read.is_(False))

            return [
                _to_notification(record)
                for record in query.order_by(NotificationRecord.timestamp.desc()).all()
            ]

    def get_notification(self, notification_id: str) -> Optional[Notification]:
        with self.storage_errors("get_notification"):
            record = self.db.get(NotificationRecord, notification_id)
            return _to_notification(record) if record else None

    def mark_read(self, notification_id: str) -> None:
        with self.storage_errors("mark_read"):
            record = self.db.get(NotificationRecord, notification_id)
            if record is None:
                raise NotFoundError(f"Notification {notification_id} not found")
            record.is_read = True
            self.db.commit()

    def mark_all_read(self, user_id: str) -> int:
        """Mark every unread notification of the user as read, returning how many changed"""
        with self.storage_errors("mark_all_read"):
            updated = (
                self.db.query(NotificationRecord)
                .filter(NotificationRecord.user_id == user_id, NotificationRecord.is_read.is_(False))
                .update({NotificationRecord.is_read: True}, synchronize_session="fetch")
            )
            self.db.commit()
            return updated

    def delete(self, notification_id: str) -> None:
        with self.storage_errors("delete_notification"):
            record = self.db.get(NotificationRecord, notification_id)
            if record is None:
                raise NotFoundError(f"Notification {notification_id} not found")
            self.db.delete(record)
            self.db.commit()


# Record <-> domain mapping


def _to_account(record: AccountRecord) -> Account:
    return Account(
        user_id=record.user_id,
        balance=record.balance,
        currency=record.currency,
        account_number=record.account_number,
        account_type=record.account_type,
        created_at=record.created_at,
        updated_at=record.updated_at,
        version=record.version,
    )


def _to_ledger_record(entry: LedgerEntry) -> LedgerEntryRecord:
    return LedgerEntryRecord(
        id=entry.id,
        user_id=entry.user_id,
        amount=entry.amount,
        type=entry.type.value,
        category=entry.category,
        description=entry.description,
        reference=entry.reference,
        timestamp=entry.timestamp,
        balance_after=entry.balance_after,
    )


def _to_ledger_entry(record: LedgerEntryRecord) -> LedgerEntry:
    return LedgerEntry(
        id=record.id,
        user_id=record.user_id,
        amount=record.amount,
        type=TransactionType(record.type),
        category=record.category,
        description=record.description,
        reference=record.reference,
        timestamp=record.timestamp,
        balance_after=record.balance_after,
    )


def _to_loan(record: LoanRecord) -> LoanRequest:
    return LoanRequest(
        id=record.id,
        user_id=record.user_id,
        amount=record.amount,
        annual_rate=record.annual_rate,
        term_months=record.term_months,
        monthly_payment=record.monthly_payment,
        total_to_pay=record.total_to_pay,
        status=LoanStatus(record.status),
        purpose=record.purpose,
        notes=record.notes,
        created_at=record.created_at,
        updated_at=record.updated_at,
        processed_at=record.processed_at,
        rejection_reason=record.rejection_reason,
    )


def _to_notification(record: NotificationRecord) -> Notification:
    return Notification(
        id=record.id,
        user_id=record.user_id,
        type=NotificationType(record.type),
        title=record.title,
        message=record.message,
        timestamp=record.timestamp,
        is_read=record.is_read,
        related_loan_id=record.related_loan_id,
        related_transaction_id=record.related_transaction_id,
    )
