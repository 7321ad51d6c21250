"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Union


class LoanStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class TransactionType(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class NotificationType(str, Enum):
    LOAN_APPROVED = "LOAN_APPROVED"
    LOAN_REJECTED = "LOAN_REJECTED"
    PAYMENT_RECEIVED = "PAYMENT_RECEIVED"
    PAYMENT_DUE = "PAYMENT_DUE"
    ACCOUNT_UPDATE = "ACCOUNT_UPDATE"
    GENERAL = "GENERAL"


@dataclass(frozen=True)
class LoanTerms:
    """Output of a loan simulation, rounded to cents"""

    monthly_payment: Decimal
    total_to_pay: Decimal
    total_interest: Decimal
    effective_annual_rate: Decimal


@dataclass(frozen=True)
class ScheduleRow:
    """Single month in an amortization schedule"""

    month: int
    payment: Decimal
    interest: Decimal
    principal: Decimal
    remaining_balance: Decimal


@dataclass
class LoanRequest:
    """Loan application with terms frozen at creation time"""

    id: str
    user_id: str
    amount: Decimal
    annual_rate: Decimal
    term_months: int
    monthly_payment: Decimal
    total_to_pay: Decimal
    status: LoanStatus
    purpose: str
    created_at: datetime
    notes: Optional[str] = None
    updated_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None


@dataclass
class Account:
    """Bank account, one per user"""

    user_id: str
    balance: Decimal
    currency: str
    account_number: str
    account_type: str
    created_at: datetime
    updated_at: datetime
    version: int = 1


@dataclass(frozen=True)
class LedgerEntry:
    """Immutable balance-affecting record (a.k.a. transaction)"""

    id: str
    user_id: str
    amount: Decimal
    type: TransactionType
    category: str
    description: str
    reference: str
    timestamp: datetime
    balance_after: Decimal


@dataclass
class Notification:
    """Message addressed to a user"""

    id: str
    user_id: str
    type: NotificationType
    title: str
    message: str
    timestamp: datetime
    is_read: bool = False
    related_loan_id: Optional[str] = None
    related_transaction_id: Optional[str] = None


@dataclass(frozen=True)
class TransferReceipt:
    """Outcome of a committed transfer"""

    from_account_number: str
    to_account_number: str
    amount: Decimal
    sender_balance_after: Decimal
    expense_entry_id: str
    income_entry_id: str
    timestamp: datetime


# Writes accepted by AccountStore.atomic_batch


@dataclass(frozen=True)
class UpdateAccountBalance:
    """Set an account's balance, only if its version is still expected_version"""

    user_id: str
    balance: Decimal
    updated_at: datetime
    expected_version: int


@dataclass(frozen=True)
class AppendLedgerEntry:
    entry: LedgerEntry


AccountWrite = Union[UpdateAccountBalance, AppendLedgerEntry]
