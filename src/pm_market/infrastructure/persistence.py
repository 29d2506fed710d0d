"""MarketRepository — concrete implementation of MarketRepositoryProtocol.

All queries use raw text() SQL (no ORM). u64 columns are NUMERIC(20, 0);
asyncpg hands them back as Decimal, so row mappers convert with int().
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.enums import Outcome
from src.pm_common.errors import CorruptedStateError, MarketAlreadyExistsError
from src.pm_market.domain.models import Market

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_COLUMNS = """
    id, authority, project_name, fundraising_goal, deadline,
    yes_mint, no_mint, currency_mint,
    yes_reserve, no_reserve, currency_reserve,
    is_settled, winning_outcome
"""

_GET_MARKET_SQL = text(f"SELECT {_COLUMNS} FROM markets WHERE id = :market_id")

_GET_MARKET_FOR_UPDATE_SQL = text(
    f"SELECT {_COLUMNS} FROM markets WHERE id = :market_id FOR UPDATE"
)

_INSERT_MARKET_SQL = text("""
    INSERT INTO markets
        (id, authority, project_name, fundraising_goal, deadline,
         yes_mint, no_mint, currency_mint,
         yes_reserve, no_reserve, currency_reserve,
         is_settled, winning_outcome)
    VALUES
        (:id, :authority, :project_name, :fundraising_goal, :deadline,
         :yes_mint, :no_mint, :currency_mint,
         :yes_reserve, :no_reserve, :currency_reserve,
         :is_settled, :winning_outcome)
    ON CONFLICT (id) DO NOTHING
    RETURNING id
""")

_SAVE_STATE_SQL = text("""
    UPDATE markets
    SET yes_reserve      = :yes_reserve,
        no_reserve       = :no_reserve,
        currency_reserve = :currency_reserve,
        is_settled       = :is_settled,
        winning_outcome  = :winning_outcome,
        updated_at = NOW()
    WHERE id = :id
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_market(row: object) -> Market:
    raw_outcome = row.winning_outcome  # type: ignore[attr-defined]
    is_settled = bool(row.is_settled)  # type: ignore[attr-defined]
    winning_outcome = Outcome.parse(raw_outcome) if raw_outcome is not None else None
    if is_settled != (winning_outcome is not None):
        raise CorruptedStateError(
            f"market {row.id}: is_settled={is_settled} "  # type: ignore[attr-defined]
            f"winning_outcome={raw_outcome!r}"
        )
    return Market(
        id=row.id,  # type: ignore[attr-defined]
        authority=row.authority,  # type: ignore[attr-defined]
        project_name=row.project_name,  # type: ignore[attr-defined]
        fundraising_goal=int(row.fundraising_goal),  # type: ignore[attr-defined]
        deadline=int(row.deadline),  # type: ignore[attr-defined]
        yes_mint=row.yes_mint,  # type: ignore[attr-defined]
        no_mint=row.no_mint,  # type: ignore[attr-defined]
        currency_mint=row.currency_mint,  # type: ignore[attr-defined]
        yes_reserve=int(row.yes_reserve),  # type: ignore[attr-defined]
        no_reserve=int(row.no_reserve),  # type: ignore[attr-defined]
        currency_reserve=int(row.currency_reserve),  # type: ignore[attr-defined]
        is_settled=is_settled,
        winning_outcome=winning_outcome,
    )


def _state_params(market: Market) -> dict[str, object]:
    return {
        "id": market.id,
        "yes_reserve": market.yes_reserve,
        "no_reserve": market.no_reserve,
        "currency_reserve": market.currency_reserve,
        "is_settled": market.is_settled,
        "winning_outcome": market.winning_outcome.value if market.winning_outcome else None,
    }


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------

class MarketRepository:
    async def get_market(self, db: AsyncSession, market_id: str) -> Market | None:
        result = await db.execute(_GET_MARKET_SQL, {"market_id": market_id})
        row = result.fetchone()
        return _row_to_market(row) if row else None

    async def get_market_for_update(
        self, db: AsyncSession, market_id: str
    ) -> Market | None:
        """Row-locks the market until the caller's transaction ends."""
        result = await db.execute(_GET_MARKET_FOR_UPDATE_SQL, {"market_id": market_id})
        row = result.fetchone()
        return _row_to_market(row) if row else None

    async def insert_market(self, db: AsyncSession, market: Market) -> None:
        params = _state_params(market)
        params.update(
            {
                "authority": market.authority,
                "project_name": market.project_name,
                "fundraising_goal": market.fundraising_goal,
                "deadline": market.deadline,
                "yes_mint": market.yes_mint,
                "no_mint": market.no_mint,
                "currency_mint": market.currency_mint,
            }
        )
        result = await db.execute(_INSERT_MARKET_SQL, params)
        if result.fetchone() is None:
            raise MarketAlreadyExistsError(market.id)

    async def save_market_state(self, db: AsyncSession, market: Market) -> None:
        await db.execute(_SAVE_STATE_SQL, _state_params(market))
