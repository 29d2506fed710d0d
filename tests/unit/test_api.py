# tests/unit/test_api.py
"""HTTP surface: routing, auth, ApiResponse envelope and AppError mapping."""
import pytest

import src.pm_amm.api.router as amm_api
import src.pm_market.api.router as market_api
import src.pm_settlement.api.router as settlement_api
from src.pm_amm.application.service import TradingService
from src.pm_common.locks import MarketLockRegistry
from src.pm_market.application.service import MarketApplicationService
from src.pm_market.domain.lifecycle import SettlementPolicy
from src.pm_settlement.application.service import SettlementService
from tests.factories import ALICE, AUTHORITY, DEADLINE, NOW, USDC, auth_headers
from tests.fakes import InMemoryMarketRepository, InMemoryTokenLedger


class Clock:
    def __init__(self, now: int) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


@pytest.fixture
def clock() -> Clock:
    return Clock(NOW)


@pytest.fixture
def ledger() -> InMemoryTokenLedger:
    ledger = InMemoryTokenLedger()
    ledger.fund(USDC, ALICE, 5_000_000)
    return ledger


@pytest.fixture(autouse=True)
def services(monkeypatch, clock, ledger):
    repo = InMemoryMarketRepository()
    locks = MarketLockRegistry()
    monkeypatch.setattr(
        market_api, "_service",
        MarketApplicationService(repo=repo, clock=clock, currency_mint=USDC),
    )
    monkeypatch.setattr(
        amm_api, "_service",
        TradingService(repo=repo, ledger=ledger, clock=clock, locks=locks),
    )
    monkeypatch.setattr(
        settlement_api, "_service",
        SettlementService(
            repo=repo, ledger=ledger, clock=clock, locks=locks, policy=SettlementPolicy()
        ),
    )
    return repo


async def _create_market(client) -> str:
    resp = await client.post(
        "/api/v1/markets",
        json={"project_name": "Proj", "fundraising_goal": 100_000, "deadline": DEADLINE},
        headers=auth_headers(AUTHORITY),
    )
    assert resp.status_code == 201
    return resp.json()["data"]["id"]


class TestAuth:
    async def test_missing_token(self, client):
        resp = await client.get("/api/v1/markets/mkt_x")
        assert resp.status_code == 401

    async def test_bad_token(self, client):
        resp = await client.get(
            "/api/v1/markets/mkt_x", headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert resp.status_code == 401


class TestMarkets:
    async def test_create_and_get(self, client):
        market_id = await _create_market(client)

        resp = await client.get(f"/api/v1/markets/{market_id}", headers=auth_headers(ALICE))

        body = resp.json()
        assert resp.status_code == 200
        assert body["code"] == 0
        assert body["data"]["authority"] == AUTHORITY
        assert body["data"]["status"] == "OPEN"
        assert body["request_id"].startswith("req_")
        assert resp.headers["X-Request-ID"] == body["request_id"]

    async def test_not_found_envelope(self, client):
        resp = await client.get("/api/v1/markets/mkt_missing", headers=auth_headers(ALICE))
        assert resp.status_code == 404
        assert resp.json()["code"] == 3001

    async def test_invalid_name(self, client):
        resp = await client.post(
            "/api/v1/markets",
            json={"project_name": "", "fundraising_goal": 1, "deadline": DEADLINE},
            headers=auth_headers(AUTHORITY),
        )
        assert resp.status_code == 422
        assert resp.json()["code"] == 3003

    async def test_nul_in_name(self, client):
        resp = await client.post(
            "/api/v1/markets",
            json={"project_name": "Proj\u0000", "fundraising_goal": 1, "deadline": DEADLINE},
            headers=auth_headers(AUTHORITY),
        )
        assert resp.status_code == 422
        assert resp.json()["code"] == 3003

    async def test_duplicate(self, client):
        await _create_market(client)
        resp = await client.post(
            "/api/v1/markets",
            json={"project_name": "Proj", "fundraising_goal": 1, "deadline": DEADLINE},
            headers=auth_headers(AUTHORITY),
        )
        assert resp.status_code == 409
        assert resp.json()["code"] == 3004


class TestTrading:
    async def test_quote_then_buy(self, client):
        market_id = await _create_market(client)

        quote = await client.get(
            f"/api/v1/markets/{market_id}/quote",
            params={"direction": "BUY", "outcome": "YES", "amount": 1_000_000},
            headers=auth_headers(ALICE),
        )
        assert quote.json()["data"]["amount_out"] == 1_000_000_000

        buy = await client.post(
            f"/api/v1/markets/{market_id}/buy",
            json={"outcome": "YES", "amount": 1_000_000},
            headers=auth_headers(ALICE),
        )
        data = buy.json()["data"]
        assert buy.status_code == 200
        assert data["direction"] == "BUY"
        assert data["amount_out"] == 1_000_000_000
        assert data["currency_reserve"] == 1_000_000

    async def test_zero_amount(self, client):
        market_id = await _create_market(client)
        resp = await client.post(
            f"/api/v1/markets/{market_id}/buy",
            json={"outcome": "NO", "amount": 0},
            headers=auth_headers(ALICE),
        )
        assert resp.status_code == 422
        assert resp.json()["code"] == 4001

    async def test_sell_without_liquidity(self, client):
        market_id = await _create_market(client)
        resp = await client.post(
            f"/api/v1/markets/{market_id}/sell",
            json={"outcome": "NO", "amount": 5},
            headers=auth_headers(ALICE),
        )
        assert resp.json()["code"] == 4002

    async def test_unknown_outcome_rejected_by_schema(self, client):
        market_id = await _create_market(client)
        resp = await client.post(
            f"/api/v1/markets/{market_id}/buy",
            json={"outcome": "MAYBE", "amount": 1},
            headers=auth_headers(ALICE),
        )
        assert resp.status_code == 422


class TestSettlementFlow:
    async def test_settle_and_redeem(self, client, clock, ledger):
        market_id = await _create_market(client)
        await client.post(
            f"/api/v1/markets/{market_id}/buy",
            json={"outcome": "YES", "amount": 2_000_000},
            headers=auth_headers(ALICE),
        )

        early = await client.post(
            f"/api/v1/markets/{market_id}/settle",
            json={"observed_result": 150_000},
            headers=auth_headers(AUTHORITY),
        )
        assert early.json()["code"] == 3007

        clock.now = DEADLINE
        forbidden = await client.post(
            f"/api/v1/markets/{market_id}/settle",
            json={"observed_result": 150_000},
            headers=auth_headers(ALICE),
        )
        assert forbidden.status_code == 403

        settled = await client.post(
            f"/api/v1/markets/{market_id}/settle",
            json={"observed_result": 150_000},
            headers=auth_headers(AUTHORITY),
        )
        assert settled.json()["data"]["winning_outcome"] == "YES"

        redeemed = await client.post(
            f"/api/v1/markets/{market_id}/redeem",
            json={"amount": 2_000_000_000},
            headers=auth_headers(ALICE),
        )
        assert redeemed.json()["data"]["currency_out"] == 2_000_000
        assert await ledger.balance_of(None, USDC, ALICE) == 5_000_000

    async def test_oversized_sell_is_short_balance(self, client):
        market_id = await _create_market(client)
        await client.post(
            f"/api/v1/markets/{market_id}/buy",
            json={"outcome": "YES", "amount": 1_000_000},
            headers=auth_headers(ALICE),
        )

        resp = await client.post(
            f"/api/v1/markets/{market_id}/sell",
            json={"outcome": "YES", "amount": 2_000_000_000},
            headers=auth_headers(ALICE),
        )
        assert resp.status_code == 422
        assert resp.json()["code"] == 2001

    async def test_position_before_and_after_settlement(self, client, clock):
        market_id = await _create_market(client)
        await client.post(
            f"/api/v1/markets/{market_id}/buy",
            json={"outcome": "YES", "amount": 2_000_000},
            headers=auth_headers(ALICE),
        )

        before = await client.get(
            f"/api/v1/markets/{market_id}/position", headers=auth_headers(ALICE)
        )
        data = before.json()["data"]
        assert before.status_code == 200
        assert data["holder"] == ALICE
        assert data["yes_balance"] == 2_000_000_000
        assert data["currency_balance_display"] == "$3.000000"
        assert data["redeemable_payout"] == 0

        clock.now = DEADLINE
        await client.post(
            f"/api/v1/markets/{market_id}/settle",
            json={"observed_result": 150_000},
            headers=auth_headers(AUTHORITY),
        )

        after = await client.get(
            f"/api/v1/markets/{market_id}/position", headers=auth_headers(ALICE)
        )
        data = after.json()["data"]
        assert data["winning_outcome"] == "YES"
        assert data["redeemable_tokens"] == 2_000_000_000
        assert data["redeemable_payout"] == 2_000_000

    async def test_position_requires_auth(self, client):
        market_id = await _create_market(client)
        resp = await client.get(f"/api/v1/markets/{market_id}/position")
        assert resp.status_code == 401
