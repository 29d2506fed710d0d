"""TokenLedgerRepository — Postgres adapter for TokenLedgerProtocol.

Balances live in token_accounts (one row per (mint, owner)); every movement
appends one row to ledger_entries. Balance-mutating statements are atomic
UPDATE ... RETURNING: zero rows back means a constraint failed (insufficient
balance, missing account, or a credit that would leave u64).

Transaction ownership: the CALLER (application service) commits or rolls back.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.enums import LedgerEntryType
from src.pm_common.errors import (
    AccountNotFoundError,
    ArithmeticOverflowError,
    InsufficientBalanceError,
)
from src.pm_common.units import U64_MAX
from src.pm_ledger.domain.models import TokenAccount

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_GET_ACCOUNT_SQL = text("""
    SELECT mint, owner, balance
    FROM token_accounts
    WHERE mint = :mint AND owner = :owner
""")

_CREDIT_SQL = text("""
    INSERT INTO token_accounts (mint, owner, balance)
    VALUES (:mint, :owner, :amount)
    ON CONFLICT (mint, owner) DO UPDATE
        SET balance = token_accounts.balance + :amount,
            updated_at = NOW()
        WHERE token_accounts.balance + :amount <= :u64_max
    RETURNING balance
""")

_DEBIT_SQL = text("""
    UPDATE token_accounts
    SET balance = balance - :amount,
        updated_at = NOW()
    WHERE mint = :mint AND owner = :owner AND balance >= :amount
    RETURNING balance
""")

_INSERT_ENTRY_SQL = text("""
    INSERT INTO ledger_entries
        (mint, owner, entry_type, amount, balance_after, reference_id)
    VALUES
        (:mint, :owner, :entry_type, :amount, :balance_after, :reference_id)
""")


def _row_to_account(row: object) -> TokenAccount:
    return TokenAccount(
        mint=row.mint,  # type: ignore[attr-defined]
        owner=row.owner,  # type: ignore[attr-defined]
        balance=int(row.balance),  # type: ignore[attr-defined]
    )


class TokenLedgerRepository:
    """Concrete ledger adapter — all operations atomic at the SQL level."""

    async def get_account(
        self, db: AsyncSession, mint: str, owner: str
    ) -> TokenAccount | None:
        result = await db.execute(_GET_ACCOUNT_SQL, {"mint": mint, "owner": owner})
        row = result.fetchone()
        return _row_to_account(row) if row else None

    async def balance_of(
        self, db: AsyncSession, mint: str, owner: str, strict: bool = False
    ) -> int:
        account = await self.get_account(db, mint, owner)
        if account is None:
            if strict:
                raise AccountNotFoundError(owner, mint)
            return 0
        return account.balance

    async def mint_to(
        self, db: AsyncSession, mint: str, owner: str, amount: int, reference_id: str
    ) -> int:
        balance_after = await self._credit(db, mint, owner, amount)
        await self._write_entry(
            db, mint, owner, LedgerEntryType.MINT, amount, balance_after, reference_id
        )
        return balance_after

    async def burn_from(
        self, db: AsyncSession, mint: str, owner: str, amount: int, reference_id: str
    ) -> int:
        balance_after = await self._debit(db, mint, owner, amount)
        await self._write_entry(
            db, mint, owner, LedgerEntryType.BURN, -amount, balance_after, reference_id
        )
        return balance_after

    async def transfer(
        self,
        db: AsyncSession,
        mint: str,
        source: str,
        destination: str,
        amount: int,
        reference_id: str,
    ) -> None:
        source_after = await self._debit(db, mint, source, amount)
        await self._write_entry(
            db, mint, source, LedgerEntryType.TRANSFER_OUT, -amount, source_after, reference_id
        )
        destination_after = await self._credit(db, mint, destination, amount)
        await self._write_entry(
            db,
            mint,
            destination,
            LedgerEntryType.TRANSFER_IN,
            amount,
            destination_after,
            reference_id,
        )

    # -----------------------------------------------------------------------
    # Internals
    # -----------------------------------------------------------------------

    async def _credit(self, db: AsyncSession, mint: str, owner: str, amount: int) -> int:
        result = await db.execute(
            _CREDIT_SQL,
            {"mint": mint, "owner": owner, "amount": amount, "u64_max": U64_MAX},
        )
        row = result.fetchone()
        if row is None:
            raise ArithmeticOverflowError(f"credit of {amount} to {owner} on {mint}")
        return int(row.balance)

    async def _debit(self, db: AsyncSession, mint: str, owner: str, amount: int) -> int:
        result = await db.execute(
            _DEBIT_SQL, {"mint": mint, "owner": owner, "amount": amount}
        )
        row = result.fetchone()
        if row is None:
            account = await self.get_account(db, mint, owner)
            if account is None:
                raise AccountNotFoundError(owner, mint)
            raise InsufficientBalanceError(amount, account.balance)
        return int(row.balance)

    async def _write_entry(
        self,
        db: AsyncSession,
        mint: str,
        owner: str,
        entry_type: LedgerEntryType,
        amount: int,
        balance_after: int,
        reference_id: str,
    ) -> None:
        await db.execute(
            _INSERT_ENTRY_SQL,
            {
                "mint": mint,
                "owner": owner,
                "entry_type": entry_type.value,
                "amount": amount,
                "balance_after": balance_after,
                "reference_id": reference_id,
            },
        )
