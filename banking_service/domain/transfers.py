"""Peer-to-peer balance transfers with mirrored ledger entries"""

import logging
import uuid
from datetime import datetime
from typing import Optional

from banking_service.domain.exceptions import (
    InsufficientFunds,
    InvalidAmount,
    RecipientAccountNotFound,
    SelfTransferNotAllowed,
    SenderAccountNotFound,
)
from banking_service.domain.models import (
    AppendLedgerEntry,
    LedgerEntry,
    TransactionType,
    TransferReceipt,
    UpdateAccountBalance,
)
from banking_service.domain.ports import AccountStore
from banking_service.utils.date_utils import utc_now
from banking_service.utils.money import Numeric, to_decimal

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "Transfer"


def execute_transfer(
    accounts: AccountStore,
    from_user_id: str,
    to_account_number: str,
    amount: Numeric,
    description: str = "",
    category: str = DEFAULT_CATEGORY,
    now: Optional[datetime] = None,
) -> TransferReceipt:
    """
    Move funds from the caller's account to another account by number.

    Checks run in order and stop at the first failure:
    1. amount > 0                      (InvalidAmount)
    2. sender account exists           (SenderAccountNotFound)
    3. sender balance covers amount    (InsufficientFunds)
    4. recipient account exists        (RecipientAccountNotFound)
    5. recipient is a different user   (SelfTransferNotAllowed)

    Both balance updates and both ledger entries go to the store as a single
    atomic batch. Each balance update is conditional on the account version
    read here, so a concurrent transfer that changed either account makes the
    whole batch fail with ConcurrentUpdateError instead of overdrawing.

    Not idempotent: every successful call moves money again.
    """
    amount = to_decimal(amount)
    if amount <= 0:
        raise InvalidAmount("Transfer amount must be greater than 0")

    sender = accounts.get_account(from_user_id)
    if sender is None:
        raise SenderAccountNotFound(f"No account found for user {from_user_id}")

    if sender.balance < amount:
        raise InsufficientFunds("Insufficient funds")

    recipient = accounts.get_account_by_number(to_account_number)
    if recipient is None:
        raise RecipientAccountNotFound(f"Account {to_account_number} not found")

    if sender.user_id == recipient.user_id:
        raise SelfTransferNotAllowed("You cannot transfer to your own account")

    timestamp = now or utc_now()
    new_sender_balance = sender.balance - amount
    new_recipient_balance = recipient.balance + amount

    expense = LedgerEntry(
        id=str(uuid.uuid4()),
        user_id=sender.user_id,
        amount=amount,
        type=TransactionType.EXPENSE,
        category=category,
        description=description.strip() or f"Transfer to account {to_account_number}",
        reference=to_account_number,
        timestamp=timestamp,
        balance_after=new_sender_balance,
    )
    income = LedgerEntry(
        id=str(uuid.uuid4()),
        user_id=recipient.user_id,
        amount=amount,
        type=TransactionType.INCOME,
        category=category,
        description=f"Transfer from account {sender.account_number}",
        reference=sender.account_number,
        timestamp=timestamp,
        balance_after=new_recipient_balance,
    )

    accounts.atomic_batch(
        [
            UpdateAccountBalance(
                user_id=sender.user_id,
                balance=new_sender_balance,
                updated_at=timestamp,
                expected_version=sender.version,
            ),
            UpdateAccountBalance(
                user_id=recipient.user_id,
                balance=new_recipient_balance,
                updated_at=timestamp,
                expected_version=recipient.version,
            ),
            AppendLedgerEntry(entry=expense),
            AppendLedgerEntry(entry=income),
        ]
    )

    logger.info(
        "Transfer committed",
        extra={
            "from_account": sender.account_number,
            "to_account": recipient.account_number,
            "amount": str(amount),
        },
    )

    return TransferReceipt(
        from_account_number=sender.account_number,
        to_account_number=recipient.account_number,
        amount=amount,
        sender_balance_after=new_sender_balance,
        expense_entry_id=expense.id,
        income_entry_id=income.id,
        timestamp=timestamp,
    )
