# tests/unit/test_pricing_properties.py
"""Property tests for pricing and redemption arithmetic (hypothesis)."""
from hypothesis import given, settings
from hypothesis import strategies as st

from src.pm_amm.domain.pricing import quote_buy, quote_sell
from src.pm_common.enums import Outcome
from src.pm_market.domain.models import Market
from src.pm_settlement.domain.redemption import compute_redemption
from tests.factories import make_market

reserves = st.integers(min_value=1, max_value=10**15)
amounts = st.integers(min_value=1, max_value=10**12)


@given(tokens_in=st.integers(min_value=1, max_value=10**18), outcome=reserves, currency=reserves)
def test_sell_never_reaches_currency_reserve(tokens_in, outcome, currency):
    assert quote_sell(tokens_in, outcome, currency) < currency


@given(currency_in=amounts, outcome=reserves, currency=reserves)
def test_buy_never_reaches_outcome_reserve(currency_in, outcome, currency):
    assert quote_buy(currency_in, outcome, currency) < outcome


@given(x=amounts, outcome=reserves, currency=reserves)
def test_buy_never_raises_pool_ratio(x, outcome, currency):
    tokens = quote_buy(x, outcome, currency)
    # (outcome + tokens) / (currency + x) <= outcome / currency
    assert (outcome + tokens) * currency <= outcome * (currency + x)


@given(x=amounts, outcome=reserves, currency=reserves)
def test_repeated_equal_buys_never_improve(x, outcome, currency):
    first = quote_buy(x, outcome, currency)
    second = quote_buy(x, outcome + first, currency + x)
    assert second <= first


@given(
    trades=st.lists(
        st.tuples(st.sampled_from(Outcome), st.booleans(), amounts), max_size=30
    )
)
def test_currency_reserve_is_deposits_minus_withdrawals(trades):
    market = make_market()
    deposited = withdrawn = 0
    for outcome, is_buy, amount in trades:
        if is_buy:
            tokens = quote_buy(amount, market.reserve_for(outcome), market.currency_reserve)
            market.record_buy(outcome, amount, tokens)
            deposited += amount
        else:
            held = market.reserve_for(outcome)
            if held == 0:
                continue
            tokens_in = min(amount, held)
            out = quote_sell(tokens_in, held, market.currency_reserve)
            market.record_sell(outcome, tokens_in, out)
            withdrawn += out
        assert market.currency_reserve == deposited - withdrawn


@settings(max_examples=200)
@given(
    shares=st.lists(st.integers(min_value=1, max_value=10**12), min_size=1, max_size=12),
    pool=st.integers(min_value=0, max_value=10**13),
    data=st.data(),
)
def test_redemptions_never_exceed_pool_in_any_order(shares, pool, data):
    market: Market = make_market(
        yes_reserve=sum(shares),
        no_reserve=123,
        currency_reserve=pool,
        is_settled=True,
        winning_outcome=Outcome.YES,
    )
    order = data.draw(st.permutations(shares))
    paid = 0
    for amount in order:
        out = compute_redemption(market, amount)
        assert out <= market.currency_reserve
        market.record_redemption(amount, out)
        paid += out
    assert paid == pool
    assert market.yes_reserve == 0
    assert market.currency_reserve == 0
