"""Custody invariant verification after each mutating operation.

The pool's three custody accounts must hold exactly what the market's
reserve counters say:

  balance(yes_mint,      custody) == yes_reserve
  balance(no_mint,       custody) == no_reserve
  balance(currency_mint, custody) == currency_reserve
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.addresses import custody_owner
from src.pm_common.errors import CustodyMismatchError
from src.pm_ledger.domain.repository import TokenLedgerProtocol
from src.pm_market.domain.models import Market

logger = logging.getLogger(__name__)


async def verify_custody(
    market: Market, ledger: TokenLedgerProtocol, db: AsyncSession
) -> None:
    """Raises CustodyMismatchError on the first disagreement."""
    pool = custody_owner(market.id)
    checks = (
        ("yes", market.yes_mint, market.yes_reserve),
        ("no", market.no_mint, market.no_reserve),
        ("currency", market.currency_mint, market.currency_reserve),
    )
    for label, mint, reserve in checks:
        balance = await ledger.balance_of(db, mint, pool)
        if balance != reserve:
            msg = f"market={market.id} {label}: custody={balance} reserve={reserve}"
            logger.error("Custody mismatch: %s", msg)
            raise CustodyMismatchError(msg)

    logger.debug(
        "Custody OK: market=%s yes=%d no=%d currency=%d",
        market.id,
        market.yes_reserve,
        market.no_reserve,
        market.currency_reserve,
    )
