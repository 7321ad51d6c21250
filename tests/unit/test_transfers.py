"""Unit tests for the transfer operation against in-memory stores"""

import pytest
from datetime import datetime, timezone
from decimal import Decimal
from banking_service.domain.exceptions import (
    ConcurrentUpdateError,
    InsufficientFunds,
    InvalidAmount,
    RecipientAccountNotFound,
    SelfTransferNotAllowed,
    SenderAccountNotFound,
    StorageError,
)
from banking_service.domain.models import TransactionType
from banking_service.domain.transfers import execute_transfer

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def funded(account_store):
    """Alice holds 500 on 1000000001, Bob holds 200 on 2000000002"""
    account_store.add("alice", "1000000001", "500.00")
    account_store.add("bob", "2000000002", "200.00")
    return account_store


def assert_untouched(store):
    assert store.balance("alice") == Decimal("500.00")
    assert store.balance("bob") == Decimal("200.00")
    assert store.entries == []
    assert store.batch_count == 0


def test_transfer_moves_funds_and_records_mirrored_entries(funded):
    receipt = execute_transfer(funded, "alice", "2000000002", Decimal("100"), "rent", now=NOW)

    assert funded.balance("alice") == Decimal("400.00")
    assert funded.balance("bob") == Decimal("300.00")
    assert receipt.sender_balance_after == Decimal("400.00")
    assert funded.batch_count == 1

    expenses = [e for e in funded.entries if e.type == TransactionType.EXPENSE]
    incomes = [e for e in funded.entries if e.type == TransactionType.INCOME]
    assert len(expenses) == 1
    assert len(incomes) == 1

    expense, income = expenses[0], incomes[0]
    assert expense.user_id == "alice"
    assert expense.amount == Decimal("100")
    assert expense.balance_after == Decimal("400.00")
    assert expense.reference == "2000000002"
    assert expense.description == "rent"
    assert expense.category == "Transfer"
    assert expense.timestamp == NOW

    assert income.user_id == "bob"
    assert income.balance_after == Decimal("300.00")
    assert income.reference == "1000000001"
    assert income.description == "Transfer from account 1000000001"

    assert {receipt.expense_entry_id, receipt.income_entry_id} == {expense.id, income.id}


def test_transfer_bumps_account_versions(funded):
    execute_transfer(funded, "alice", "2000000002", 50)

    assert funded.accounts["alice"].version == 2
    assert funded.accounts["bob"].version == 2


def test_empty_description_falls_back_to_recipient_reference(funded):
    execute_transfer(funded, "alice", "2000000002", 25, "")

    expense = next(e for e in funded.entries if e.type == TransactionType.EXPENSE)
    assert expense.description == "Transfer to account 2000000002"


def test_transfer_entire_balance(funded):
    execute_transfer(funded, "alice", "2000000002", "500.00")

    assert funded.balance("alice") == Decimal("0.00")
    assert funded.balance("bob") == Decimal("700.00")


@pytest.mark.parametrize("amount", [0, -10, "-0.01"])
def test_non_positive_amount_rejected(funded, amount):
    with pytest.raises(InvalidAmount):
        execute_transfer(funded, "alice", "2000000002", amount)

    assert_untouched(funded)


def test_unknown_sender(funded):
    with pytest.raises(SenderAccountNotFound):
        execute_transfer(funded, "mallory", "2000000002", 10)

    assert_untouched(funded)


def test_insufficient_funds_leaves_accounts_unchanged(funded):
    with pytest.raises(InsufficientFunds):
        execute_transfer(funded, "alice", "2000000002", "500.01")

    assert_untouched(funded)


def test_insufficient_funds_checked_before_recipient_lookup(funded):
    """Precondition order: an overdraft to a missing account reports the overdraft"""
    with pytest.raises(InsufficientFunds):
        execute_transfer(funded, "alice", "9999999999", 1000)


def test_unknown_recipient(funded):
    with pytest.raises(RecipientAccountNotFound):
        execute_transfer(funded, "alice", "9999999999", 10)

    assert_untouched(funded)


def test_self_transfer_rejected(funded):
    with pytest.raises(SelfTransferNotAllowed):
        execute_transfer(funded, "alice", "1000000001", 10)

    assert_untouched(funded)


def test_commit_failure_leaves_no_partial_state(funded):
    funded.fail_commit = True

    with pytest.raises(StorageError):
        execute_transfer(funded, "alice", "2000000002", 100)

    funded.fail_commit = False
    assert_untouched(funded)


def test_concurrent_debit_between_check_and_commit_is_rejected(funded, monkeypatch):
    """
    Another transfer drains Alice's account after her balance was checked.
    The stale version makes the batch fail instead of overdrawing.
    """
    original_lookup = funded.get_account_by_number

    def lookup_while_racing(account_number):
        racing = funded.accounts["alice"]
        racing.balance = Decimal("0.00")
        racing.version += 1
        return original_lookup(account_number)

    monkeypatch.setattr(funded, "get_account_by_number", lookup_while_racing)

    with pytest.raises(ConcurrentUpdateError):
        execute_transfer(funded, "alice", "2000000002", 400)

    assert funded.balance("alice") == Decimal("0.00")
    assert funded.balance("bob") == Decimal("200.00")
    assert funded.entries == []


def test_transfers_are_not_idempotent(funded):
    execute_transfer(funded, "alice", "2000000002", 100, "rent")
    execute_transfer(funded, "alice", "2000000002", 100, "rent")

    assert funded.balance("alice") == Decimal("300.00")
    assert funded.balance("bob") == Decimal("400.00")
    assert len(funded.entries) == 4
