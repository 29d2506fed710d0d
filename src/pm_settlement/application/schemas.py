"""Pydantic schemas for pm_settlement: settle, redeem, discard, position."""

from pydantic import BaseModel, Field

from src.pm_common.enums import Outcome
from src.pm_common.units import U64_MAX, currency_to_display, tokens_to_display
from src.pm_market.domain.models import Market


class SettleRequest(BaseModel):
    observed_result: int = Field(
        ge=0, le=U64_MAX, description="Amount raised, as reported by the authority"
    )


class SettleResponse(BaseModel):
    market_id: str
    fundraising_goal: int
    observed_result: int
    winning_outcome: Outcome


class RedeemRequest(BaseModel):
    amount: int = Field(ge=0, le=U64_MAX, description="Winning-token units to burn")


class RedeemResponse(BaseModel):
    market_id: str
    winning_outcome: Outcome
    tokens_burned: int
    currency_out: int
    currency_out_display: str
    remaining_winning_reserve: int
    remaining_currency_reserve: int

    @classmethod
    def build(
        cls,
        market_id: str,
        winner: Outcome,
        tokens_burned: int,
        currency_out: int,
        remaining_winning_reserve: int,
        remaining_currency_reserve: int,
    ) -> "RedeemResponse":
        return cls(
            market_id=market_id,
            winning_outcome=winner,
            tokens_burned=tokens_burned,
            currency_out=currency_out,
            currency_out_display=currency_to_display(currency_out),
            remaining_winning_reserve=remaining_winning_reserve,
            remaining_currency_reserve=remaining_currency_reserve,
        )


class DiscardRequest(BaseModel):
    amount: int = Field(ge=0, le=U64_MAX, description="Losing-token units to burn")


class DiscardResponse(BaseModel):
    market_id: str
    outcome: Outcome
    tokens_burned: int


class PositionResponse(BaseModel):
    """One holder's balances in a market and what redeeming them would pay now."""

    market_id: str
    holder: str
    yes_balance: int
    yes_balance_display: str
    no_balance: int
    no_balance_display: str
    currency_balance: int
    currency_balance_display: str
    is_settled: bool
    winning_outcome: Outcome | None
    redeemable_tokens: int
    redeemable_payout: int
    redeemable_payout_display: str

    @classmethod
    def build(
        cls,
        market: Market,
        holder: str,
        yes_balance: int,
        no_balance: int,
        currency_balance: int,
        redeemable_payout: int,
    ) -> "PositionResponse":
        winner = market.winning_outcome if market.is_settled else None
        if winner is Outcome.YES:
            redeemable_tokens = yes_balance
        elif winner is Outcome.NO:
            redeemable_tokens = no_balance
        else:
            redeemable_tokens = 0
        return cls(
            market_id=market.id,
            holder=holder,
            yes_balance=yes_balance,
            yes_balance_display=tokens_to_display(yes_balance),
            no_balance=no_balance,
            no_balance_display=tokens_to_display(no_balance),
            currency_balance=currency_balance,
            currency_balance_display=currency_to_display(currency_balance),
            is_settled=market.is_settled,
            winning_outcome=winner,
            redeemable_tokens=redeemable_tokens,
            redeemable_payout=redeemable_payout,
            redeemable_payout_display=currency_to_display(redeemable_payout),
        )
