"""MarketApplicationService — create and read markets.

create_market writes inside a transaction (commit / rollback here);
get_market is read-only.
"""

import logging
from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.pm_common.addresses import derive_market_id, derive_mint_id
from src.pm_common.datetime_utils import unix_now
from src.pm_common.enums import Outcome
from src.pm_common.errors import MarketAlreadyExistsError, MarketNotFoundError
from src.pm_market.application.schemas import CreateMarketRequest, MarketDetail
from src.pm_market.domain.models import create_market
from src.pm_market.domain.repository import MarketRepositoryProtocol
from src.pm_market.infrastructure.persistence import MarketRepository

logger = logging.getLogger(__name__)


class MarketApplicationService:
    def __init__(
        self,
        repo: MarketRepositoryProtocol | None = None,
        clock: Callable[[], int] = unix_now,
        currency_mint: str | None = None,
    ) -> None:
        self._repo: MarketRepositoryProtocol = repo or MarketRepository()
        self._clock = clock
        self._currency_mint = currency_mint or settings.CURRENCY_MINT

    async def create_market(
        self, db: AsyncSession, authority: str, request: CreateMarketRequest
    ) -> MarketDetail:
        now = self._clock()
        market_id = derive_market_id(authority, request.project_name)
        market = create_market(
            market_id=market_id,
            authority=authority,
            project_name=request.project_name,
            fundraising_goal=request.fundraising_goal,
            deadline=request.deadline,
            now=now,
            yes_mint=derive_mint_id(market_id, Outcome.YES),
            no_mint=derive_mint_id(market_id, Outcome.NO),
            currency_mint=self._currency_mint,
        )
        try:
            if await self._repo.get_market(db, market_id) is not None:
                raise MarketAlreadyExistsError(market_id)
            await self._repo.insert_market(db, market)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Market created: market=%s authority=%s name=%r goal=%d deadline=%d",
            market.id,
            authority,
            market.project_name,
            market.fundraising_goal,
            market.deadline,
        )
        return MarketDetail.from_domain(market, now)

    async def get_market(self, db: AsyncSession, market_id: str) -> MarketDetail:
        market = await self._repo.get_market(db, market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        return MarketDetail.from_domain(market, self._clock())
