"""SettlementService — settle a market, then redeem or discard outcome tokens.

Same transaction discipline as trading: per-market lock, market row FOR
UPDATE, commit on success, rollback and re-raise on any error. get_position
is the read side and takes no lock.
"""

import logging
from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.pm_amm.domain.invariants import verify_custody
from src.pm_common.datetime_utils import unix_now
from src.pm_common.enums import Outcome
from src.pm_common.errors import MarketNotFoundError
from src.pm_common.locks import MarketLockRegistry, market_locks
from src.pm_ledger.domain.repository import TokenLedgerProtocol
from src.pm_ledger.infrastructure.persistence import TokenLedgerRepository
from src.pm_market.domain.lifecycle import SettlementPolicy, settle
from src.pm_market.domain.models import Market
from src.pm_market.domain.repository import MarketRepositoryProtocol
from src.pm_market.infrastructure.persistence import MarketRepository
from src.pm_settlement.application.schemas import (
    DiscardRequest,
    DiscardResponse,
    PositionResponse,
    RedeemRequest,
    RedeemResponse,
    SettleRequest,
    SettleResponse,
)
from src.pm_settlement.domain.redemption import (
    compute_redemption,
    execute_discard_losing,
    execute_redeem,
)

logger = logging.getLogger(__name__)


class SettlementService:
    def __init__(
        self,
        repo: MarketRepositoryProtocol | None = None,
        ledger: TokenLedgerProtocol | None = None,
        clock: Callable[[], int] = unix_now,
        locks: MarketLockRegistry | None = None,
        policy: SettlementPolicy | None = None,
    ) -> None:
        self._repo: MarketRepositoryProtocol = repo or MarketRepository()
        self._ledger: TokenLedgerProtocol = ledger or TokenLedgerRepository()
        self._clock = clock
        self._locks = locks or market_locks
        self._policy = policy or SettlementPolicy(
            goal_inclusive=settings.SETTLEMENT_GOAL_INCLUSIVE
        )

    async def _load(self, db: AsyncSession, market_id: str) -> Market:
        market = await self._repo.get_market_for_update(db, market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        return market

    async def settle(
        self, db: AsyncSession, market_id: str, caller: str, request: SettleRequest
    ) -> SettleResponse:
        async with self._locks.lock_for(market_id):
            try:
                market = await self._load(db, market_id)
                winner = settle(
                    market, caller, request.observed_result, self._clock(), self._policy
                )
                await self._repo.save_market_state(db, market)
                await db.commit()
            except Exception:
                await db.rollback()
                raise
        return SettleResponse(
            market_id=market.id,
            fundraising_goal=market.fundraising_goal,
            observed_result=request.observed_result,
            winning_outcome=winner,
        )

    async def redeem(
        self, db: AsyncSession, market_id: str, holder: str, request: RedeemRequest
    ) -> RedeemResponse:
        async with self._locks.lock_for(market_id):
            try:
                market = await self._load(db, market_id)
                currency_out = await execute_redeem(
                    market, holder, request.amount, self._ledger, db
                )
                await verify_custody(market, self._ledger, db)
                await self._repo.save_market_state(db, market)
                await db.commit()
            except Exception:
                await db.rollback()
                raise
        winner = market.winning_outcome
        assert winner is not None
        return RedeemResponse.build(
            market_id=market.id,
            winner=winner,
            tokens_burned=request.amount,
            currency_out=currency_out,
            remaining_winning_reserve=market.reserve_for(winner),
            remaining_currency_reserve=market.currency_reserve,
        )

    async def discard_losing(
        self, db: AsyncSession, market_id: str, holder: str, request: DiscardRequest
    ) -> DiscardResponse:
        async with self._locks.lock_for(market_id):
            try:
                market = await self._load(db, market_id)
                await execute_discard_losing(
                    market, holder, request.amount, self._ledger, db
                )
                await db.commit()
            except Exception:
                await db.rollback()
                raise
        winner = market.winning_outcome
        assert winner is not None
        return DiscardResponse(
            market_id=market.id,
            outcome=winner.opposite(),
            tokens_burned=request.amount,
        )

    async def get_position(
        self, db: AsyncSession, market_id: str, holder: str
    ) -> PositionResponse:
        """Read-only. The payout is what redeeming every winning token would pay now."""
        market = await self._repo.get_market(db, market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        yes_balance = await self._ledger.balance_of(db, market.yes_mint, holder)
        no_balance = await self._ledger.balance_of(db, market.no_mint, holder)
        currency_balance = await self._ledger.balance_of(db, market.currency_mint, holder)

        payout = 0
        winner = market.winning_outcome
        if market.is_settled and winner is not None:
            winning_balance = yes_balance if winner is Outcome.YES else no_balance
            if winning_balance > 0:
                payout = compute_redemption(market, winning_balance)
        return PositionResponse.build(
            market, holder, yes_balance, no_balance, currency_balance, payout
        )
