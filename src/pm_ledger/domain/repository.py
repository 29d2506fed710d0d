"""Token ledger Protocol — the fungible-token collaborator the engine calls.

mint_to / burn_from / transfer / balance_of, each atomic on its own and all
of them enlisted in the caller's transaction. Errors are distinguishable:
InsufficientBalanceError when the source holds too little,
AccountNotFoundError when the source has no account for that mint.

Unit tests inject an in-memory fake that conforms to this Protocol.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession


class TokenLedgerProtocol(Protocol):
    async def balance_of(
        self, db: AsyncSession, mint: str, owner: str, strict: bool = False
    ) -> int: ...

    async def mint_to(
        self, db: AsyncSession, mint: str, owner: str, amount: int, reference_id: str
    ) -> int: ...

    async def burn_from(
        self, db: AsyncSession, mint: str, owner: str, amount: int, reference_id: str
    ) -> int: ...

    async def transfer(
        self,
        db: AsyncSession,
        mint: str,
        source: str,
        destination: str,
        amount: int,
        reference_id: str,
    ) -> None: ...
