"""Buy/sell execution against one market.

Order of work is fixed: lifecycle gate → pricing → ledger movements →
reserve commit on the Market. A sell larger than the outstanding supply
checks the seller's balance before pricing. Pricing computes every new reserve with
checked arithmetic before anything moves, and the first ledger movement is
the only one a caller can make fail (insufficient balance / no account), so
a rejected trade moves nothing. The pool's custody outcome accounts are
minted/burned in step with the outcome reserve; custody currency moves with
currency_reserve.

Called by TradingService inside a per-market lock and a DB transaction.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_amm.domain.pricing import Quote, price_buy, price_sell
from src.pm_common.addresses import custody_owner
from src.pm_common.enums import Outcome
from src.pm_common.errors import InsufficientBalanceError
from src.pm_ledger.domain.repository import TokenLedgerProtocol
from src.pm_market.domain.lifecycle import ensure_trading_open
from src.pm_market.domain.models import Market

logger = logging.getLogger(__name__)


async def ensure_holds(
    ledger: TokenLedgerProtocol, db: AsyncSession, mint: str, owner: str, amount: int
) -> None:
    """Raise InsufficientBalanceError unless owner holds at least amount of mint."""
    held = await ledger.balance_of(db, mint, owner, strict=True)
    if held < amount:
        raise InsufficientBalanceError(amount, held)


async def execute_buy(
    market: Market,
    buyer: str,
    outcome: Outcome,
    currency_in: int,
    ledger: TokenLedgerProtocol,
    db: AsyncSession,
    now: int,
) -> Quote:
    ensure_trading_open(market, now)
    quote = price_buy(currency_in, market.reserve_for(outcome), market.currency_reserve)

    ref = f"buy:{market.id}"
    pool = custody_owner(market.id)
    mint = market.mint_for(outcome)
    await ledger.transfer(db, market.currency_mint, buyer, pool, currency_in, ref)
    await ledger.mint_to(db, mint, buyer, quote.amount_out, ref)
    await ledger.mint_to(db, mint, pool, quote.amount_out, ref)

    market.record_buy(outcome, currency_in, quote.amount_out)
    logger.info(
        "Buy: market=%s buyer=%s outcome=%s currency_in=%d tokens_out=%d "
        "bootstrap=%s reserves=(yes=%d no=%d currency=%d)",
        market.id,
        buyer,
        outcome.value,
        currency_in,
        quote.amount_out,
        quote.bootstrap,
        market.yes_reserve,
        market.no_reserve,
        market.currency_reserve,
    )
    return quote


async def execute_sell(
    market: Market,
    seller: str,
    outcome: Outcome,
    tokens_in: int,
    ledger: TokenLedgerProtocol,
    db: AsyncSession,
    now: int,
) -> Quote:
    ensure_trading_open(market, now)
    mint = market.mint_for(outcome)
    outcome_reserve = market.reserve_for(outcome)
    # The reserve is the outstanding supply, so selling past it is a short balance.
    if tokens_in > outcome_reserve > 0:
        await ensure_holds(ledger, db, mint, seller, tokens_in)
    quote = price_sell(tokens_in, outcome_reserve, market.currency_reserve)

    ref = f"sell:{market.id}"
    pool = custody_owner(market.id)
    await ledger.burn_from(db, mint, seller, tokens_in, ref)
    await ledger.burn_from(db, mint, pool, tokens_in, ref)
    await ledger.transfer(db, market.currency_mint, pool, seller, quote.amount_out, ref)

    market.record_sell(outcome, tokens_in, quote.amount_out)
    logger.info(
        "Sell: market=%s seller=%s outcome=%s tokens_in=%d currency_out=%d "
        "reserves=(yes=%d no=%d currency=%d)",
        market.id,
        seller,
        outcome.value,
        tokens_in,
        quote.amount_out,
        market.yes_reserve,
        market.no_reserve,
        market.currency_reserve,
    )
    return quote
