"""SQLAlchemy ORM models, one table per document collection"""

import uuid

from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


class AccountRecord(Base):
    """Bank account keyed by owning user"""

    __tablename__ = "accounts"

    user_id = Column(String(128), primary_key=True)
    balance = Column(Numeric(14, 2), nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="USD")
    account_number = Column(String(20), nullable=False, unique=True, index=True)
    account_type = Column(String(20), nullable=False, default="SAVINGS")
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
    # Bumped on every UPDATE; the UPDATE only matches the version it was read at
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}


class LedgerEntryRecord(Base):
    """Append-only ledger entry ("transactions" collection)"""

    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(128), nullable=False, index=True)
    amount = Column(Numeric(14, 2), nullable=False)
    type = Column(String(10), nullable=False)
    category = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    reference = Column(Text, nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False, index=True)
    balance_after = Column(Numeric(14, 2), nullable=False)


class LoanRecord(Base):
    """Loan request with frozen simulation terms"""

    __tablename__ = "loans"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(128), nullable=False, index=True)
    amount = Column(Numeric(14, 2), nullable=False)
    annual_rate = Column(Numeric(9, 4), nullable=False)
    term_months = Column(Integer, nullable=False)
    monthly_payment = Column(Numeric(14, 2), nullable=False)
    total_to_pay = Column(Numeric(14, 2), nullable=False)
    status = Column(String(16), nullable=False, default="PENDING", index=True)
    purpose = Column(Text, nullable=False, default="")
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=True)
    processed_at = Column(DateTime(timezone=True), nullable=True)
    rejection_reason = Column(Text, nullable=True)


class NotificationRecord(Base):
    """User notification"""

    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(128), nullable=False, index=True)
    type = Column(String(20), nullable=False, default="GENERAL")
    title = Column(Text, nullable=False)
    message = Column(Text, nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    related_loan_id = Column(String(36), nullable=True)
    related_transaction_id = Column(String(36), nullable=True)
