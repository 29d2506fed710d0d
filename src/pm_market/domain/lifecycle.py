"""Market lifecycle: Open → Settled, no other states, no way back.

Trading is gated here before any pricing runs. Settlement is authority-only,
legal once the deadline has passed, and happens exactly once.

Trust assumption: the engine has no oracle. The authority self-reports the
observed fundraising result and the policy below turns it into a winner.
"""

import logging
from dataclasses import dataclass

from src.pm_common.enums import Outcome
from src.pm_common.errors import (
    AlreadySettledError,
    DeadlineNotPassedError,
    DeadlinePassedError,
    MarketSettledError,
    UnauthorizedError,
)
from src.pm_common.units import to_u64
from src.pm_market.domain.models import Market

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SettlementPolicy:
    """YES wins when the observed result reaches the goal.

    goal_inclusive=True  → observed_result >= goal
    goal_inclusive=False → observed_result >  goal
    """

    goal_inclusive: bool = True

    def decide(self, observed_result: int, fundraising_goal: int) -> Outcome:
        if self.goal_inclusive:
            met = observed_result >= fundraising_goal
        else:
            met = observed_result > fundraising_goal
        return Outcome.YES if met else Outcome.NO


def ensure_trading_open(market: Market, now: int) -> None:
    """Gate for buy/sell. Settled wins over deadline when both apply."""
    if market.is_settled:
        raise MarketSettledError(market.id)
    if now >= market.deadline:
        raise DeadlinePassedError(market.id)


def settle(
    market: Market,
    caller: str,
    observed_result: int,
    now: int,
    policy: SettlementPolicy,
) -> Outcome:
    """Latch the market and record the winning outcome. Reserves are untouched."""
    if caller != market.authority:
        raise UnauthorizedError(market.id)
    if now < market.deadline:
        raise DeadlineNotPassedError(market.id)
    if market.is_settled:
        raise AlreadySettledError(market.id)
    to_u64(observed_result, "observed_result")

    winner = policy.decide(observed_result, market.fundraising_goal)
    market.record_settlement(winner)
    logger.info(
        "Market settled: market=%s goal=%d result=%d winner=%s",
        market.id,
        market.fundraising_goal,
        observed_result,
        winner.value,
    )
    return winner
