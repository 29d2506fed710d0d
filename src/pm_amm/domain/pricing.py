"""Constant-product pricing for the two-sided outcome pool.

Pure functions over reserve counters, no I/O. All divisions floor, so every
rounding error stays in the pool.

Buy (currency in, outcome tokens out):
  bootstrap  (outcome_reserve == 0 or currency_reserve == 0):
      tokens_out = currency_in * BOOTSTRAP_TOKENS_PER_CURRENCY_UNIT
  otherwise:
      tokens_out = floor(currency_in * outcome_reserve / (currency_reserve + currency_in))

Sell (outcome tokens in, currency out):
  requires outcome_reserve > 0 and currency_reserve > 0
      currency_out = floor(tokens_in * currency_reserve / (outcome_reserve + tokens_in))

Both reserves grow together on a buy (the buyer's tokens are newly minted and
counted into the outcome reserve). Outside bootstrap tokens_out < outcome_reserve
and the ratio outcome_reserve / currency_reserve never rises on a buy.
One buy of 2x therefore yields fewer tokens than two sequential buys of x.
"""

from dataclasses import dataclass

from src.pm_common.enums import TradeDirection
from src.pm_common.errors import NoLiquidityError, ZeroAmountError
from src.pm_common.units import (
    CURRENCY_DECIMALS,
    OUTCOME_TOKEN_DECIMALS,
    checked_add,
    checked_sub,
    mul_div_floor,
    to_u64,
)

# One whole USDC buys one whole outcome token while the pool has no price:
# 10^6 currency units -> 10^9 token units.
BOOTSTRAP_TOKENS_PER_CURRENCY_UNIT = 10 ** (OUTCOME_TOKEN_DECIMALS - CURRENCY_DECIMALS)


@dataclass(frozen=True)
class Quote:
    direction: TradeDirection
    amount_in: int
    amount_out: int
    outcome_reserve_after: int
    currency_reserve_after: int
    bootstrap: bool


def is_bootstrap(outcome_reserve: int, currency_reserve: int) -> bool:
    return outcome_reserve == 0 or currency_reserve == 0


def quote_buy(currency_in: int, outcome_reserve: int, currency_reserve: int) -> int:
    """Outcome tokens minted for currency_in at the current reserves."""
    if currency_in <= 0:
        raise ZeroAmountError()
    to_u64(currency_in, "currency_in")
    if is_bootstrap(outcome_reserve, currency_reserve):
        return to_u64(currency_in * BOOTSTRAP_TOKENS_PER_CURRENCY_UNIT, "tokens_out")
    # denominator is a u64 sum; mul_div_floor narrows the quotient
    denominator = checked_add(currency_reserve, currency_in, "buy denominator")
    return mul_div_floor(currency_in, outcome_reserve, denominator, "tokens_out")


def quote_sell(tokens_in: int, outcome_reserve: int, currency_reserve: int) -> int:
    """Currency paid out for tokens_in at the current reserves."""
    if tokens_in <= 0:
        raise ZeroAmountError()
    to_u64(tokens_in, "tokens_in")
    if outcome_reserve == 0 or currency_reserve == 0:
        raise NoLiquidityError(
            f"outcome_reserve={outcome_reserve} currency_reserve={currency_reserve}"
        )
    denominator = checked_add(outcome_reserve, tokens_in, "sell denominator")
    return mul_div_floor(tokens_in, currency_reserve, denominator, "currency_out")


def price_buy(currency_in: int, outcome_reserve: int, currency_reserve: int) -> Quote:
    tokens_out = quote_buy(currency_in, outcome_reserve, currency_reserve)
    return Quote(
        direction=TradeDirection.BUY,
        amount_in=currency_in,
        amount_out=tokens_out,
        outcome_reserve_after=checked_add(outcome_reserve, tokens_out, "outcome reserve"),
        currency_reserve_after=checked_add(currency_reserve, currency_in, "currency reserve"),
        bootstrap=is_bootstrap(outcome_reserve, currency_reserve),
    )


def price_sell(tokens_in: int, outcome_reserve: int, currency_reserve: int) -> Quote:
    currency_out = quote_sell(tokens_in, outcome_reserve, currency_reserve)
    return Quote(
        direction=TradeDirection.SELL,
        amount_in=tokens_in,
        amount_out=currency_out,
        outcome_reserve_after=checked_sub(outcome_reserve, tokens_in, "outcome reserve"),
        currency_reserve_after=checked_sub(currency_reserve, currency_out, "currency reserve"),
        bootstrap=False,
    )
