# src/pm_market/domain/repository.py
"""Repository Protocol — dependency inversion for testability.

Unit tests inject an in-memory fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_market.domain.models import Market


class MarketRepositoryProtocol(Protocol):
    async def get_market(self, db: AsyncSession, market_id: str) -> Market | None: ...

    async def get_market_for_update(
        self, db: AsyncSession, market_id: str
    ) -> Market | None: ...

    async def insert_market(self, db: AsyncSession, market: Market) -> None: ...

    async def save_market_state(self, db: AsyncSession, market: Market) -> None: ...
