"""Account opening and lookup"""

import logging
import random
from datetime import datetime
from decimal import Decimal
from typing import Optional

from banking_service.domain.exceptions import (
    AccountAlreadyExistsError,
    AccountNotFoundError,
    StorageError,
)
from banking_service.domain.models import Account
from banking_service.domain.ports import AccountStore
from banking_service.utils.date_utils import utc_now

logger = logging.getLogger(__name__)


def generate_account_number(digits: int = 10) -> str:
    """Random account number with exactly `digits` digits (no leading zero)"""
    lowest = 10 ** (digits - 1)
    return str(random.randint(lowest, 10 ** digits - 1))


def open_account(
    accounts: AccountStore,
    user_id: str,
    currency: str = "USD",
    account_type: str = "SAVINGS",
    digits: int = 10,
    max_attempts: int = 5,
    now: Optional[datetime] = None,
) -> Account:
    """
    Create the user's account with a zero balance.

    Account numbers are random; a number already in use is redrawn up to
    max_attempts times.
    """
    if accounts.get_account(user_id) is not None:
        raise AccountAlreadyExistsError(f"User {user_id} already has an account")

    for _ in range(max_attempts):
        account_number = generate_account_number(digits)
        if not accounts.account_number_exists(account_number):
            break
    else:
        raise StorageError("Could not allocate a unique account number")

    timestamp = now or utc_now()
    account = accounts.create_account(
        Account(
            user_id=user_id,
            balance=Decimal("0.00"),
            currency=currency,
            account_number=account_number,
            account_type=account_type,
            created_at=timestamp,
            updated_at=timestamp,
        )
    )
    logger.info("Account opened", extra={"user_id": user_id, "account_number": account.account_number})
    return account


def get_account(accounts: AccountStore, user_id: str) -> Account:
    account = accounts.get_account(user_id)
    if account is None:
        raise AccountNotFoundError("Account not found")
    return account
