"""POST /v1/transfers - Peer account transfer endpoint"""

import logging
import time

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from banking_service.api.dependencies import get_account_store, get_current_user_id, get_request_id
from banking_service.api.errors import http_error
from banking_service.api.v1.schemas import TransferRequest, TransferResponse
from banking_service.config import settings
from banking_service.domain.exceptions import (
    ConcurrentUpdateError,
    InsufficientFunds,
    InvalidAmount,
    RecipientAccountNotFound,
    SelfTransferNotAllowed,
    SenderAccountNotFound,
    StorageError,
)
from banking_service.domain.transfers import execute_transfer
from banking_service.infrastructure.database.repositories import AccountRepository
from banking_service.infrastructure.database.session import get_db
from banking_service.infrastructure.observability.logging import log_transfer
from banking_service.infrastructure.observability.metrics import record_transfer

router = APIRouter()


@router.post("/transfers", response_model=TransferResponse, status_code=201)
def create_transfer(
    body: TransferRequest,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    accounts: AccountRepository = Depends(get_account_store),
):
    """
    Send money from the caller's account to another account.

    Flow:
    1. Validate amount and both accounts
    2. Check the sender can cover the amount
    3. Commit both balances and both ledger entries in one transaction
    4. Record metrics and logs

    Rejected transfers leave both accounts untouched. 409 means an account
    changed mid-transfer and the request can be retried as is.
    """
    start_time = time.time()
    request_id = get_request_id(request)
    outcome = "completed"

    try:
        receipt = execute_transfer(
            accounts,
            from_user_id=user_id,
            to_account_number=body.to_account_number,
            amount=body.amount,
            description=body.description,
            category=settings.transfer_category,
        )

    except (InvalidAmount, InsufficientFunds, SelfTransferNotAllowed) as e:
        outcome = e.code
        raise http_error(422, e)

    except (SenderAccountNotFound, RecipientAccountNotFound) as e:
        outcome = e.code
        raise http_error(404, e)

    except ConcurrentUpdateError as e:
        outcome = e.code
        logging.warning(f"Concurrent update: {e}", extra={"request_id": request_id})
        raise http_error(409, e)

    except StorageError as e:
        outcome = e.code
        logging.error(f"Storage error: {e}", extra={"request_id": request_id})
        raise http_error(503, e)

    except Exception as e:
        outcome = "error"
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    finally:
        duration_ms = (time.time() - start_time) * 1000
        record_transfer(outcome, body.amount)
        log_transfer(request_id, user_id, body.to_account_number, outcome, duration_ms)

    return TransferResponse.model_validate(receipt)
