"""Account opening and balance endpoints"""

from fastapi import APIRouter, Depends

from banking_service.api.dependencies import get_account_store, get_current_user_id
from banking_service.api.errors import http_error
from banking_service.api.v1.schemas import AccountResponse, BalanceResponse
from banking_service.config import settings
from banking_service.domain.accounts import get_account, open_account
from banking_service.domain.exceptions import AccountAlreadyExistsError, AccountNotFoundError, StorageError
from banking_service.infrastructure.database.repositories import AccountRepository

router = APIRouter()


@router.post("/accounts", response_model=AccountResponse, status_code=201)
def create_account(
    user_id: str = Depends(get_current_user_id),
    accounts: AccountRepository = Depends(get_account_store),
):
    """Open the caller's account with a zero balance and a fresh account number"""
    try:
        account = open_account(
            accounts,
            user_id,
            currency=settings.default_currency,
            account_type=settings.default_account_type,
            digits=settings.account_number_digits,
            max_attempts=settings.account_number_max_attempts,
        )
    except AccountAlreadyExistsError as e:
        raise http_error(409, e)
    except StorageError as e:
        raise http_error(503, e)

    return AccountResponse.model_validate(account)


@router.get("/accounts/me", response_model=AccountResponse)
def read_account(
    user_id: str = Depends(get_current_user_id),
    accounts: AccountRepository = Depends(get_account_store),
):
    try:
        account = get_account(accounts, user_id)
    except AccountNotFoundError as e:
        raise http_error(404, e)
    except StorageError as e:
        raise http_error(503, e)

    return AccountResponse.model_validate(account)


@router.get("/accounts/me/balance", response_model=BalanceResponse)
def read_balance(
    user_id: str = Depends(get_current_user_id),
    accounts: AccountRepository = Depends(get_account_store),
):
    try:
        account = get_account(accounts, user_id)
    except AccountNotFoundError as e:
        raise http_error(404, e)
    except StorageError as e:
        raise http_error(503, e)

    return BalanceResponse(balance=account.balance, currency=account.currency)
