"""Read access to a user's ledger entries"""

from datetime import date
from typing import List, Optional

from banking_service.domain.exceptions import NotFoundError
from banking_service.domain.models import LedgerEntry, TransactionType
from banking_service.domain.ports import LedgerStore
from banking_service.utils.date_utils import day_bounds


def transaction_history(
    ledger: LedgerStore,
    user_id: str,
    type: Optional[TransactionType] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    category: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[LedgerEntry]:
    """Entries newest first; start_date and end_date are inclusive days"""
    start, end = day_bounds(start_date, end_date)
    return ledger.list_entries(user_id, type=type, start=start, end=end, category=category, limit=limit)


def get_user_entry(ledger: LedgerStore, user_id: str, entry_id: str) -> LedgerEntry:
    entry = ledger.get_entry(entry_id)
    if entry is None or entry.user_id != user_id:
        raise NotFoundError(f"Transaction {entry_id} not found")
    return entry
