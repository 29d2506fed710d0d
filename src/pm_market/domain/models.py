"""Domain model for pm_market — the economic state of one market.

The reserve triple (yes_reserve, no_reserve, currency_reserve) is never set
directly. It changes only through the record_* mutators below, each of which
computes every new value with checked u64 arithmetic first and assigns only
when all of them succeeded, so a failed mutation leaves the market as it was.
"""

import unicodedata
from dataclasses import dataclass

from src.pm_common.enums import MarketStatus, Outcome
from src.pm_common.errors import (
    CorruptedStateError,
    InvalidDeadlineError,
    InvalidProjectNameError,
)
from src.pm_common.units import checked_add, checked_sub, to_u64

MAX_PROJECT_NAME_BYTES = 64


@dataclass
class Market:
    id: str
    authority: str
    project_name: str
    fundraising_goal: int
    deadline: int                    # unix seconds; trading legal while now < deadline
    yes_mint: str
    no_mint: str
    currency_mint: str
    yes_reserve: int = 0
    no_reserve: int = 0
    currency_reserve: int = 0
    is_settled: bool = False
    winning_outcome: Outcome | None = None

    # -- read side ----------------------------------------------------------

    @property
    def status(self) -> MarketStatus:
        return MarketStatus.SETTLED if self.is_settled else MarketStatus.OPEN

    def reserve_for(self, outcome: Outcome) -> int:
        return self.yes_reserve if outcome is Outcome.YES else self.no_reserve

    def mint_for(self, outcome: Outcome) -> str:
        return self.yes_mint if outcome is Outcome.YES else self.no_mint

    def is_trading_open(self, now: int) -> bool:
        return not self.is_settled and now < self.deadline

    def seconds_remaining(self, now: int) -> int:
        return max(0, self.deadline - now)

    def implied_yes_probability(self) -> float:
        """yes / (yes + no); an empty book reads as a coin flip."""
        total = self.yes_reserve + self.no_reserve
        if total == 0:
            return 0.5
        return self.yes_reserve / total

    # -- mutators -----------------------------------------------------------

    def _with_outcome_reserve(self, outcome: Outcome, value: int) -> tuple[int, int]:
        if outcome is Outcome.YES:
            return value, self.no_reserve
        return self.yes_reserve, value

    def record_buy(self, outcome: Outcome, currency_in: int, tokens_out: int) -> None:
        new_outcome = checked_add(self.reserve_for(outcome), tokens_out, f"{outcome.value} reserve")
        new_currency = checked_add(self.currency_reserve, currency_in, "currency reserve")
        self.yes_reserve, self.no_reserve = self._with_outcome_reserve(outcome, new_outcome)
        self.currency_reserve = new_currency

    def record_sell(self, outcome: Outcome, tokens_in: int, currency_out: int) -> None:
        new_outcome = checked_sub(self.reserve_for(outcome), tokens_in, f"{outcome.value} reserve")
        new_currency = checked_sub(self.currency_reserve, currency_out, "currency reserve")
        self.yes_reserve, self.no_reserve = self._with_outcome_reserve(outcome, new_outcome)
        self.currency_reserve = new_currency

    def record_settlement(self, winner: Outcome) -> None:
        """Latch + outcome write only; reserves stay frozen as left by the last trade."""
        if self.is_settled or self.winning_outcome is not None:
            raise CorruptedStateError(f"settlement recorded twice on {self.id}")
        self.is_settled = True
        self.winning_outcome = winner

    def record_redemption(self, tokens_burned: int, currency_out: int) -> None:
        if self.winning_outcome is None:
            raise CorruptedStateError(f"redemption on unsettled market {self.id}")
        winner = self.winning_outcome
        new_winning = checked_sub(self.reserve_for(winner), tokens_burned, f"{winner.value} reserve")
        new_currency = checked_sub(self.currency_reserve, currency_out, "currency reserve")
        self.yes_reserve, self.no_reserve = self._with_outcome_reserve(winner, new_winning)
        self.currency_reserve = new_currency


def validate_project_name(project_name: str) -> None:
    """Non-blank, no control characters, at most MAX_PROJECT_NAME_BYTES in UTF-8.

    Whitespace-only names count as empty. NUL and other control characters
    are rejected here because the markets table cannot store NUL.
    """
    if not project_name or not project_name.strip():
        raise InvalidProjectNameError("must not be empty or whitespace-only")
    if any(unicodedata.category(ch) == "Cc" for ch in project_name):
        raise InvalidProjectNameError("must not contain control characters")
    size = len(project_name.encode("utf-8"))
    if size > MAX_PROJECT_NAME_BYTES:
        raise InvalidProjectNameError(
            f"{size} bytes exceeds the {MAX_PROJECT_NAME_BYTES}-byte limit"
        )


def create_market(
    market_id: str,
    authority: str,
    project_name: str,
    fundraising_goal: int,
    deadline: int,
    now: int,
    yes_mint: str,
    no_mint: str,
    currency_mint: str,
) -> Market:
    """A fresh market: zero reserves, open, no winner."""
    validate_project_name(project_name)
    if deadline <= now:
        raise InvalidDeadlineError(deadline, now)
    to_u64(fundraising_goal, "fundraising_goal")
    to_u64(deadline, "deadline")
    return Market(
        id=market_id,
        authority=authority,
        project_name=project_name,
        fundraising_goal=fundraising_goal,
        deadline=deadline,
        yes_mint=yes_mint,
        no_mint=no_mint,
        currency_mint=currency_mint,
    )
