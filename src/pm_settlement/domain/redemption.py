"""Redemption of winning tokens against a settled market's frozen pool.

    currency_out = floor(amount * currency_reserve / winning_reserve)

After each redemption both currency_reserve and winning_reserve shrink by
what was paid and burned, so the next holder divides the remaining pool by
the remaining outstanding winning tokens. Each payout is at most the current
currency_reserve (amount <= winning_reserve), so the sum of all payouts can
never exceed the pool as it stood at settlement, whatever the order.

Losing-side tokens pay nothing; discard_losing only burns them.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_amm.domain.engine import ensure_holds
from src.pm_common.addresses import custody_owner
from src.pm_common.errors import (
    ArithmeticOverflowError,
    MarketNotSettledError,
    ZeroAmountError,
)
from src.pm_common.units import mul_div_floor, to_u64
from src.pm_ledger.domain.repository import TokenLedgerProtocol
from src.pm_market.domain.models import Market

logger = logging.getLogger(__name__)


def compute_redemption(market: Market, amount: int) -> int:
    """Payout for burning `amount` winning tokens now. Pure."""
    if not market.is_settled or market.winning_outcome is None:
        raise MarketNotSettledError(market.id)
    if amount <= 0:
        raise ZeroAmountError()
    to_u64(amount, "amount")
    winning_reserve = market.reserve_for(market.winning_outcome)
    if amount > winning_reserve:
        raise ArithmeticOverflowError(
            f"redeeming {amount} exceeds outstanding winning reserve {winning_reserve}"
        )
    return mul_div_floor(amount, market.currency_reserve, winning_reserve, "currency_out")


async def execute_redeem(
    market: Market,
    holder: str,
    amount: int,
    ledger: TokenLedgerProtocol,
    db: AsyncSession,
) -> int:
    winner = market.winning_outcome
    if winner is not None and amount > market.reserve_for(winner):
        await ensure_holds(ledger, db, market.mint_for(winner), holder, amount)
    currency_out = compute_redemption(market, amount)
    assert winner is not None  # compute_redemption checked

    ref = f"redeem:{market.id}"
    pool = custody_owner(market.id)
    mint = market.mint_for(winner)
    await ledger.burn_from(db, mint, holder, amount, ref)
    await ledger.burn_from(db, mint, pool, amount, ref)
    await ledger.transfer(db, market.currency_mint, pool, holder, currency_out, ref)

    market.record_redemption(amount, currency_out)
    logger.info(
        "Redeem: market=%s holder=%s winner=%s burned=%d currency_out=%d "
        "remaining=(winning=%d currency=%d)",
        market.id,
        holder,
        winner.value,
        amount,
        currency_out,
        market.reserve_for(winner),
        market.currency_reserve,
    )
    return currency_out


async def execute_discard_losing(
    market: Market,
    holder: str,
    amount: int,
    ledger: TokenLedgerProtocol,
    db: AsyncSession,
) -> None:
    """Burn worthless losing-side tokens. No payout, reserves untouched."""
    if not market.is_settled or market.winning_outcome is None:
        raise MarketNotSettledError(market.id)
    if amount <= 0:
        raise ZeroAmountError()
    loser = market.winning_outcome.opposite()
    await ledger.burn_from(db, market.mint_for(loser), holder, amount, f"discard:{market.id}")
    logger.info(
        "Discard: market=%s holder=%s outcome=%s burned=%d",
        market.id,
        holder,
        loser.value,
        amount,
    )
