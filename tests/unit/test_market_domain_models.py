# tests/unit/test_market_domain_models.py
"""Unit tests for the Market dataclass and create_market."""
import pytest

from src.pm_common.enums import MarketStatus, Outcome
from src.pm_common.errors import (
    ArithmeticOverflowError,
    CorruptedStateError,
    InvalidDeadlineError,
    InvalidProjectNameError,
)
from src.pm_common.units import U64_MAX
from src.pm_market.domain.models import MAX_PROJECT_NAME_BYTES, create_market
from tests.factories import AUTHORITY, DEADLINE, NOW, make_market


def _create(**overrides):
    params = dict(
        market_id="mkt_test",
        authority=AUTHORITY,
        project_name="Proj",
        fundraising_goal=100_000,
        deadline=NOW + 86_400,
        now=NOW,
        yes_mint="yes_test",
        no_mint="no_test",
        currency_mint="USDC",
    )
    params.update(overrides)
    return create_market(**params)


class TestCreateMarket:
    def test_fresh_market_is_open_and_empty(self):
        m = _create()
        assert (m.yes_reserve, m.no_reserve, m.currency_reserve) == (0, 0, 0)
        assert m.is_settled is False
        assert m.winning_outcome is None
        assert m.status is MarketStatus.OPEN
        assert m.fundraising_goal == 100_000

    def test_deadline_equal_to_now_rejected(self):
        with pytest.raises(InvalidDeadlineError):
            _create(deadline=NOW)

    def test_deadline_in_past_rejected(self):
        with pytest.raises(InvalidDeadlineError):
            _create(deadline=NOW - 1)

    def test_empty_name_rejected(self):
        with pytest.raises(InvalidProjectNameError):
            _create(project_name="")

    def test_whitespace_name_rejected(self):
        with pytest.raises(InvalidProjectNameError, match="whitespace-only"):
            _create(project_name="   ")

    def test_nul_in_name_rejected(self):
        with pytest.raises(InvalidProjectNameError, match="control characters"):
            _create(project_name="Proj\x00ect")

    def test_control_character_in_name_rejected(self):
        with pytest.raises(InvalidProjectNameError):
            _create(project_name="Proj\x1b[31m")

    def test_name_at_byte_limit_accepted(self):
        m = _create(project_name="x" * MAX_PROJECT_NAME_BYTES)
        assert len(m.project_name) == MAX_PROJECT_NAME_BYTES

    def test_name_over_byte_limit_rejected(self):
        with pytest.raises(InvalidProjectNameError):
            _create(project_name="x" * (MAX_PROJECT_NAME_BYTES + 1))

    def test_name_limit_counts_utf8_bytes(self):
        # 33 two-byte characters = 66 bytes
        with pytest.raises(InvalidProjectNameError):
            _create(project_name="é" * 33)

    def test_goal_above_u64_rejected(self):
        with pytest.raises(ArithmeticOverflowError):
            _create(fundraising_goal=U64_MAX + 1)

    def test_zero_goal_allowed(self):
        assert _create(fundraising_goal=0).fundraising_goal == 0


class TestReadSide:
    def test_implied_probability_empty_book(self):
        assert make_market().implied_yes_probability() == 0.5

    def test_implied_probability(self):
        m = make_market(yes_reserve=3_000, no_reserve=1_000)
        assert m.implied_yes_probability() == 0.75

    def test_trading_window(self):
        m = make_market()
        assert m.is_trading_open(NOW)
        assert not m.is_trading_open(DEADLINE)
        assert m.seconds_remaining(NOW) == 86_400
        assert m.seconds_remaining(DEADLINE + 10) == 0

    def test_reserve_and_mint_lookup(self):
        m = make_market(yes_reserve=7, no_reserve=9)
        assert m.reserve_for(Outcome.YES) == 7
        assert m.reserve_for(Outcome.NO) == 9
        assert m.mint_for(Outcome.YES) == m.yes_mint
        assert m.mint_for(Outcome.NO) == m.no_mint


class TestMutators:
    def test_record_buy_grows_both_reserves(self):
        m = make_market()
        m.record_buy(Outcome.NO, 1_000_000, 1_000_000_000)
        assert m.no_reserve == 1_000_000_000
        assert m.yes_reserve == 0
        assert m.currency_reserve == 1_000_000

    def test_record_sell_underflow_leaves_state_unchanged(self):
        m = make_market(yes_reserve=10, currency_reserve=100)
        with pytest.raises(ArithmeticOverflowError):
            m.record_sell(Outcome.YES, 5, 200)
        assert (m.yes_reserve, m.currency_reserve) == (10, 100)

    def test_record_buy_overflow_leaves_state_unchanged(self):
        m = make_market(yes_reserve=U64_MAX, currency_reserve=5)
        with pytest.raises(ArithmeticOverflowError):
            m.record_buy(Outcome.YES, 1, 1)
        assert (m.yes_reserve, m.currency_reserve) == (U64_MAX, 5)

    def test_settlement_recorded_once(self):
        m = make_market()
        m.record_settlement(Outcome.YES)
        assert m.status is MarketStatus.SETTLED
        with pytest.raises(CorruptedStateError):
            m.record_settlement(Outcome.NO)
        assert m.winning_outcome is Outcome.YES

    def test_redemption_requires_winner(self):
        with pytest.raises(CorruptedStateError):
            make_market().record_redemption(1, 1)
