"""Pydantic schemas for API request/response validation"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from banking_service.domain.models import LoanStatus, NotificationType, TransactionType


# Largest value a Numeric(14, 2) column holds
MAX_AMOUNT = Decimal("999999999999.99")
# Largest value a Numeric(9, 4) column holds
MAX_ANNUAL_RATE = Decimal("99999.9999")
MAX_TERM_MONTHS = 600


class SimulationRequest(BaseModel):
    """Request body for POST /v1/loans/simulate"""

    amount: Decimal = Field(..., le=MAX_AMOUNT, description="Principal to borrow")
    annual_rate: Decimal = Field(
        ..., le=MAX_ANNUAL_RATE, description="Nominal annual rate in percent, e.g. 12.5"
    )
    term_months: int = Field(..., le=MAX_TERM_MONTHS, description="Number of monthly installments")


class LoanTermsResponse(BaseModel):
    """Response for POST /v1/loans/simulate"""

    model_config = ConfigDict(from_attributes=True)

    monthly_payment: Decimal
    total_to_pay: Decimal
    total_interest: Decimal
    effective_annual_rate: Decimal


class ScheduleRowSchema(BaseModel):
    """Single month of an amortization schedule"""

    model_config = ConfigDict(from_attributes=True)

    month: int
    payment: Decimal
    interest: Decimal
    principal: Decimal
    remaining_balance: Decimal


class ScheduleResponse(BaseModel):
    """Response for POST /v1/loans/schedule"""

    terms: LoanTermsResponse
    schedule: List[ScheduleRowSchema]


class LoanCreateRequest(SimulationRequest):
    """Request body for POST /v1/loans; amount and rate must fit their stored columns exactly"""

    amount: Decimal = Field(..., le=MAX_AMOUNT, decimal_places=2, description="Principal to borrow")
    annual_rate: Decimal = Field(
        ..., le=MAX_ANNUAL_RATE, decimal_places=4, description="Nominal annual rate in percent, e.g. 12.5"
    )
    purpose: str = Field("", max_length=200)
    notes: Optional[str] = Field(None, max_length=1000)


class LoanResponse(BaseModel):
    """Loan request as stored"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    amount: Decimal
    annual_rate: Decimal
    term_months: int
    monthly_payment: Decimal
    total_to_pay: Decimal
    status: LoanStatus
    purpose: str
    notes: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None


class LoanStatusUpdate(BaseModel):
    """Request body for PATCH /v1/loans/{loan_id}/status"""

    status: LoanStatus
    rejection_reason: Optional[str] = Field(None, max_length=500)


class AccountResponse(BaseModel):
    """Response for account endpoints"""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    balance: Decimal
    currency: str
    account_number: str
    account_type: str
    created_at: datetime
    updated_at: datetime


class BalanceResponse(BaseModel):
    """Response for GET /v1/accounts/me/balance"""

    balance: Decimal
    currency: str


class TransferRequest(BaseModel):
    """Request body for POST /v1/transfers"""

    to_account_number: str = Field(..., min_length=1, description="Recipient account number")
    amount: Decimal = Field(..., decimal_places=2, description="Amount to send")
    description: str = Field("", max_length=200)


class TransferResponse(BaseModel):
    """Response for POST /v1/transfers"""

    model_config = ConfigDict(from_attributes=True)

    from_account_number: str
    to_account_number: str
    amount: Decimal
    sender_balance_after: Decimal
    expense_entry_id: str
    income_entry_id: str
    timestamp: datetime


class TransactionResponse(BaseModel):
    """Single ledger entry"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    amount: Decimal
    type: TransactionType
    category: str
    description: str
    reference: str
    timestamp: datetime
    balance_after: Decimal


class NotificationResponse(BaseModel):
    """Single notification"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    type: NotificationType
    title: str
    message: str
    timestamp: datetime
    is_read: bool
    related_loan_id: Optional[str] = None
    related_transaction_id: Optional[str] = None


class MarkAllReadResponse(BaseModel):
    updated: int
