"""Pydantic schemas for AMM trading: buy, sell and the read-only quote preview.

amount is currency units for BUY and outcome-token units for SELL. Zero is
accepted here so that the engine answers with its own ZeroAmount error.
"""

from pydantic import BaseModel, Field

from src.pm_amm.domain.pricing import Quote
from src.pm_common.enums import Outcome, TradeDirection
from src.pm_common.units import (
    CURRENCY_DECIMALS,
    OUTCOME_TOKEN_DECIMALS,
    U64_MAX,
    currency_to_display,
    tokens_to_display,
)
from src.pm_market.domain.models import Market


class TradeRequest(BaseModel):
    outcome: Outcome
    amount: int = Field(ge=0, le=U64_MAX)


def average_price(direction: TradeDirection, quote: Quote) -> float | None:
    """Whole-currency paid (or received) per whole outcome token. Display only."""
    if direction is TradeDirection.BUY:
        currency, tokens = quote.amount_in, quote.amount_out
    else:
        currency, tokens = quote.amount_out, quote.amount_in
    if tokens == 0:
        return None
    return (currency / 10**CURRENCY_DECIMALS) / (tokens / 10**OUTCOME_TOKEN_DECIMALS)


class QuoteResponse(BaseModel):
    market_id: str
    direction: TradeDirection
    outcome: Outcome
    amount_in: int
    amount_out: int
    amount_out_display: str
    average_price: float | None
    bootstrap: bool
    outcome_reserve_after: int
    currency_reserve_after: int
    implied_yes_probability_after: float

    @classmethod
    def from_quote(
        cls, market: Market, outcome: Outcome, quote: Quote
    ) -> "QuoteResponse":
        if quote.direction is TradeDirection.BUY:
            out_display = tokens_to_display(quote.amount_out)
        else:
            out_display = currency_to_display(quote.amount_out)
        if outcome is Outcome.YES:
            yes_after, no_after = quote.outcome_reserve_after, market.no_reserve
        else:
            yes_after, no_after = market.yes_reserve, quote.outcome_reserve_after
        total = yes_after + no_after
        return cls(
            market_id=market.id,
            direction=quote.direction,
            outcome=outcome,
            amount_in=quote.amount_in,
            amount_out=quote.amount_out,
            amount_out_display=out_display,
            average_price=average_price(quote.direction, quote),
            bootstrap=quote.bootstrap,
            outcome_reserve_after=quote.outcome_reserve_after,
            currency_reserve_after=quote.currency_reserve_after,
            implied_yes_probability_after=yes_after / total if total else 0.5,
        )


class TradeResponse(BaseModel):
    market_id: str
    direction: TradeDirection
    outcome: Outcome
    amount_in: int
    amount_out: int
    average_price: float | None
    yes_reserve: int
    no_reserve: int
    currency_reserve: int
    implied_yes_probability: float

    @classmethod
    def from_result(
        cls, market: Market, outcome: Outcome, quote: Quote
    ) -> "TradeResponse":
        """market is the post-trade state."""
        return cls(
            market_id=market.id,
            direction=quote.direction,
            outcome=outcome,
            amount_in=quote.amount_in,
            amount_out=quote.amount_out,
            average_price=average_price(quote.direction, quote),
            yes_reserve=market.yes_reserve,
            no_reserve=market.no_reserve,
            currency_reserve=market.currency_reserve,
            implied_yes_probability=market.implied_yes_probability(),
        )
