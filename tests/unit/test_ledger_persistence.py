# tests/unit/test_ledger_persistence.py
"""Unit tests for TokenLedgerRepository using a mocked AsyncSession."""
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.pm_common.errors import (
    AccountNotFoundError,
    ArithmeticOverflowError,
    InsufficientBalanceError,
)
from src.pm_ledger.infrastructure.persistence import TokenLedgerRepository


def _result(row=None) -> MagicMock:
    result = MagicMock()
    result.fetchone.return_value = row
    return result


def _balance_row(balance: int) -> MagicMock:
    row = MagicMock()
    row.balance = balance
    return row


def _account_row(mint: str, owner: str, balance: int) -> MagicMock:
    row = MagicMock()
    row.mint = mint
    row.owner = owner
    row.balance = balance
    return row


@pytest.fixture
def db() -> MagicMock:
    session = MagicMock()
    session.execute = AsyncMock()
    return session


class TestBalanceOf:
    async def test_existing_account(self, db):
        db.execute.return_value = _result(_account_row("USDC", "alice", 42))
        assert await TokenLedgerRepository().balance_of(db, "USDC", "alice") == 42

    async def test_missing_account_reads_zero(self, db):
        db.execute.return_value = _result(None)
        assert await TokenLedgerRepository().balance_of(db, "USDC", "ghost") == 0

    async def test_missing_account_strict(self, db):
        db.execute.return_value = _result(None)
        with pytest.raises(AccountNotFoundError):
            await TokenLedgerRepository().balance_of(db, "USDC", "ghost", strict=True)


class TestMintTo:
    async def test_credits_and_writes_entry(self, db):
        db.execute.side_effect = [_result(_balance_row(150)), _result()]

        after = await TokenLedgerRepository().mint_to(db, "yes_x", "alice", 50, "buy:m")

        assert after == 150
        assert db.execute.call_count == 2
        entry_params = db.execute.call_args_list[1].args[1]
        assert entry_params["entry_type"] == "MINT"
        assert entry_params["amount"] == 50
        assert entry_params["balance_after"] == 150
        assert entry_params["reference_id"] == "buy:m"

    async def test_credit_past_u64_rejected(self, db):
        db.execute.return_value = _result(None)
        with pytest.raises(ArithmeticOverflowError):
            await TokenLedgerRepository().mint_to(db, "yes_x", "alice", 1, "buy:m")


class TestBurnFrom:
    async def test_debits_with_negative_entry(self, db):
        db.execute.side_effect = [_result(_balance_row(10)), _result()]

        after = await TokenLedgerRepository().burn_from(db, "yes_x", "alice", 5, "sell:m")

        assert after == 10
        entry_params = db.execute.call_args_list[1].args[1]
        assert entry_params["entry_type"] == "BURN"
        assert entry_params["amount"] == -5

    async def test_insufficient_balance(self, db):
        db.execute.side_effect = [_result(None), _result(_account_row("yes_x", "alice", 3))]
        with pytest.raises(InsufficientBalanceError):
            await TokenLedgerRepository().burn_from(db, "yes_x", "alice", 5, "sell:m")

    async def test_missing_account(self, db):
        db.execute.side_effect = [_result(None), _result(None)]
        with pytest.raises(AccountNotFoundError):
            await TokenLedgerRepository().burn_from(db, "yes_x", "ghost", 5, "sell:m")


class TestTransfer:
    async def test_debit_then_credit(self, db):
        db.execute.side_effect = [
            _result(_balance_row(90)),   # debit source
            _result(),                   # entry
            _result(_balance_row(10)),   # credit destination
            _result(),                   # entry
        ]

        await TokenLedgerRepository().transfer(db, "USDC", "alice", "pool", 10, "buy:m")

        types = [c.args[1]["entry_type"] for c in db.execute.call_args_list[1::2]]
        assert types == ["TRANSFER_OUT", "TRANSFER_IN"]

    async def test_failed_debit_skips_credit(self, db):
        db.execute.side_effect = [_result(None), _result(_account_row("USDC", "alice", 1))]
        with pytest.raises(InsufficientBalanceError):
            await TokenLedgerRepository().transfer(db, "USDC", "alice", "pool", 10, "buy:m")
        assert db.execute.call_count == 2
