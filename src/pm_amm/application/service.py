"""TradingService — buy, sell and quote against one market.

Mutating calls run under the market's lock and inside one DB transaction:
load market FOR UPDATE → engine → custody check → save reserves → commit.
Any exception rolls the whole transaction back (ledger movements included)
and is re-raised unchanged. Nothing is retried.
"""

import logging
from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_amm.application.schemas import QuoteResponse, TradeRequest, TradeResponse
from src.pm_amm.domain.engine import execute_buy, execute_sell
from src.pm_amm.domain.invariants import verify_custody
from src.pm_amm.domain.pricing import Quote, price_buy, price_sell
from src.pm_common.datetime_utils import unix_now
from src.pm_common.enums import Outcome, TradeDirection
from src.pm_common.errors import MarketNotFoundError
from src.pm_common.locks import MarketLockRegistry, market_locks
from src.pm_ledger.domain.repository import TokenLedgerProtocol
from src.pm_ledger.infrastructure.persistence import TokenLedgerRepository
from src.pm_market.domain.lifecycle import ensure_trading_open
from src.pm_market.domain.repository import MarketRepositoryProtocol
from src.pm_market.infrastructure.persistence import MarketRepository

logger = logging.getLogger(__name__)


class TradingService:
    def __init__(
        self,
        repo: MarketRepositoryProtocol | None = None,
        ledger: TokenLedgerProtocol | None = None,
        clock: Callable[[], int] = unix_now,
        locks: MarketLockRegistry | None = None,
    ) -> None:
        self._repo: MarketRepositoryProtocol = repo or MarketRepository()
        self._ledger: TokenLedgerProtocol = ledger or TokenLedgerRepository()
        self._clock = clock
        self._locks = locks or market_locks

    async def buy(
        self, db: AsyncSession, market_id: str, buyer: str, request: TradeRequest
    ) -> TradeResponse:
        return await self._trade(db, market_id, buyer, TradeDirection.BUY, request)

    async def sell(
        self, db: AsyncSession, market_id: str, seller: str, request: TradeRequest
    ) -> TradeResponse:
        return await self._trade(db, market_id, seller, TradeDirection.SELL, request)

    async def quote(
        self,
        db: AsyncSession,
        market_id: str,
        direction: TradeDirection,
        outcome: Outcome,
        amount: int,
    ) -> QuoteResponse:
        """Preview a trade at current reserves. Read-only; nothing is locked or moved."""
        market = await self._repo.get_market(db, market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        ensure_trading_open(market, self._clock())
        pricer = price_buy if direction is TradeDirection.BUY else price_sell
        quote: Quote = pricer(amount, market.reserve_for(outcome), market.currency_reserve)
        return QuoteResponse.from_quote(market, outcome, quote)

    async def _trade(
        self,
        db: AsyncSession,
        market_id: str,
        caller: str,
        direction: TradeDirection,
        request: TradeRequest,
    ) -> TradeResponse:
        async with self._locks.lock_for(market_id):
            try:
                market = await self._repo.get_market_for_update(db, market_id)
                if market is None:
                    raise MarketNotFoundError(market_id)
                now = self._clock()
                if direction is TradeDirection.BUY:
                    quote = await execute_buy(
                        market, caller, request.outcome, request.amount, self._ledger, db, now
                    )
                else:
                    quote = await execute_sell(
                        market, caller, request.outcome, request.amount, self._ledger, db, now
                    )
                await verify_custody(market, self._ledger, db)
                await self._repo.save_market_state(db, market)
                await db.commit()
            except Exception:
                await db.rollback()
                logger.info(
                    "Trade rejected: market=%s caller=%s direction=%s outcome=%s amount=%d",
                    market_id,
                    caller,
                    direction.value,
                    request.outcome.value,
                    request.amount,
                )
                raise
        return TradeResponse.from_result(market, request.outcome, quote)
