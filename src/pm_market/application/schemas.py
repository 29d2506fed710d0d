"""Pydantic schemas for pm_market API requests and responses.

MarketDetail carries the read-side fields the dashboard renders: status,
whether trading is open, seconds left, implied probabilities
(yes_reserve / (yes_reserve + no_reserve), 50/50 on an empty book) and
display strings. None of it feeds back into the engine.
"""

from pydantic import BaseModel, Field

from src.pm_common.datetime_utils import unix_to_iso
from src.pm_common.units import U64_MAX, currency_to_display, tokens_to_display
from src.pm_market.domain.models import MAX_PROJECT_NAME_BYTES, Market


class CreateMarketRequest(BaseModel):
    project_name: str = Field(
        description=f"1 to {MAX_PROJECT_NAME_BYTES} UTF-8 bytes, no control characters"
    )
    fundraising_goal: int = Field(ge=0, le=U64_MAX)
    deadline: int = Field(ge=0, le=U64_MAX, description="Unix timestamp (seconds)")


class MarketDetail(BaseModel):
    id: str
    authority: str
    project_name: str
    fundraising_goal: int
    deadline: int
    deadline_at: str | None
    status: str
    trading_open: bool
    seconds_remaining: int
    yes_mint: str
    no_mint: str
    currency_mint: str
    yes_reserve: int
    no_reserve: int
    currency_reserve: int
    yes_reserve_display: str
    no_reserve_display: str
    currency_reserve_display: str
    implied_yes_probability: float
    implied_no_probability: float
    is_settled: bool
    winning_outcome: str | None

    @classmethod
    def from_domain(cls, m: Market, now: int) -> "MarketDetail":
        yes_probability = m.implied_yes_probability()
        return cls(
            id=m.id,
            authority=m.authority,
            project_name=m.project_name,
            fundraising_goal=m.fundraising_goal,
            deadline=m.deadline,
            deadline_at=unix_to_iso(m.deadline),
            status=m.status.value,
            trading_open=m.is_trading_open(now),
            seconds_remaining=m.seconds_remaining(now),
            yes_mint=m.yes_mint,
            no_mint=m.no_mint,
            currency_mint=m.currency_mint,
            yes_reserve=m.yes_reserve,
            no_reserve=m.no_reserve,
            currency_reserve=m.currency_reserve,
            yes_reserve_display=tokens_to_display(m.yes_reserve),
            no_reserve_display=tokens_to_display(m.no_reserve),
            currency_reserve_display=currency_to_display(m.currency_reserve),
            implied_yes_probability=yes_probability,
            implied_no_probability=1.0 - yes_probability,
            is_settled=m.is_settled,
            winning_outcome=m.winning_outcome.value if m.winning_outcome else None,
        )
