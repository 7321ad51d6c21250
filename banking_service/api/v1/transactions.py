"""GET /v1/transactions - Caller's ledger history"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from banking_service.api.dependencies import get_current_user_id, get_ledger_store
from banking_service.api.errors import http_error
from banking_service.api.v1.schemas import TransactionResponse
from banking_service.config import settings
from banking_service.domain.exceptions import NotFoundError, StorageError
from banking_service.domain.ledger import get_user_entry, transaction_history
from banking_service.domain.models import TransactionType
from banking_service.infrastructure.database.repositories import LedgerRepository

router = APIRouter()


@router.get("/transactions", response_model=List[TransactionResponse])
def list_transactions(
    type: Optional[TransactionType] = Query(None, description="INCOME or EXPENSE"),
    start_date: Optional[date] = Query(None, description="First day to include"),
    end_date: Optional[date] = Query(None, description="Last day to include"),
    category: Optional[str] = Query(None),
    user_id: str = Depends(get_current_user_id),
    ledger: LedgerRepository = Depends(get_ledger_store),
):
    """
    Retrieve the caller's ledger entries, newest first.

    Returns:
        Entries matching every filter given
    """
    if start_date and end_date and start_date > end_date:
        raise HTTPException(status_code=400, detail="start_date must not be after end_date")

    try:
        entries = transaction_history(
            ledger,
            user_id,
            type=type,
            start_date=start_date,
            end_date=end_date,
            category=category,
            limit=settings.history_limit,
        )
    except StorageError as e:
        raise http_error(503, e)

    return [TransactionResponse.model_validate(entry) for entry in entries]


@router.get("/transactions/{transaction_id}", response_model=TransactionResponse)
def get_transaction(
    transaction_id: str,
    user_id: str = Depends(get_current_user_id),
    ledger: LedgerRepository = Depends(get_ledger_store),
):
    try:
        entry = get_user_entry(ledger, user_id, transaction_id)
    except NotFoundError as e:
        raise http_error(404, e)
    except StorageError as e:
        raise http_error(503, e)

    return TransactionResponse.model_validate(entry)
