"""
API tests for portfolio valuation endpoints.

Tests cover:
- POST /api/portfolio/{address} (success, camelCase fields, filtering)
- Invalid wallet address (400)
- Malformed request body (422)
- Degraded pricing response
- Health and root endpoints
"""

from fastapi.testclient import TestClient

from tokenfolio.api.deps import get_portfolio_aggregator
from tokenfolio.config.settings import USDC_MINT
from tokenfolio.main import app

from tests.conftest import FailingPriceProvider, WALLET_ADDRESS, MINT_A, MINT_B


def holding(mint: str, ui_balance: float, decimals: int = 6) -> dict:
    return {
        "mint": mint,
        "balance": int(round(ui_balance * 10 ** decimals)),
        "decimals": decimals,
        "uiBalance": ui_balance,
    }


# =============================================================================
# VALUATION TESTS
# =============================================================================


class TestValuePortfolioAPI:
    """Tests for POST /api/portfolio/{address}."""

    def test_value_portfolio_success(self, client: TestClient, liquidity_provider):
        """
        GIVEN A worth $5, B worth $15,000 with $500 liquidity, USDC worth $50
        WHEN I POST the holdings
        THEN response is 200 with 2 tokens and totalValue 55
        """
        liquidity_provider.liquidity = {MINT_B: 500.0}

        response = client.post(f"/api/portfolio/{WALLET_ADDRESS}", json={
            "tokens": [holding(MINT_A, 5), holding(MINT_B, 7_500), holding(USDC_MINT, 50)],
        })

        assert response.status_code == 200
        data = response.json()
        assert data["address"] == WALLET_ADDRESS
        assert data["tokenCount"] == 2
        assert abs(data["totalValue"] - 55.0) < 0.001
        assert [t["mint"] for t in data["tokens"]] == [USDC_MINT, MINT_A]
        assert data["pricingStatus"] == "ok"
        assert data["lastUpdated"] is not None

    def test_response_uses_camel_case(self, client: TestClient):
        response = client.post(f"/api/portfolio/{WALLET_ADDRESS}", json={
            "tokens": [holding(MINT_A, 2)],
        })

        token = response.json()["tokens"][0]
        assert token["uiBalance"] == 2
        assert token["price"] == 1.0
        assert token["value"] == 2.0
        assert "ui_balance" not in token

    def test_ui_balance_derived_when_missing(self, client: TestClient):
        response = client.post(f"/api/portfolio/{WALLET_ADDRESS}", json={
            "tokens": [{"mint": MINT_A, "balance": 3_000_000, "decimals": 6}],
        })

        assert response.status_code == 200
        assert response.json()["tokens"][0]["uiBalance"] == 3.0

    def test_empty_wallet(self, client: TestClient):
        response = client.post(f"/api/portfolio/{WALLET_ADDRESS}", json={"tokens": []})

        assert response.status_code == 200
        assert response.json()["tokenCount"] == 0
        assert response.json()["totalValue"] == 0.0


# =============================================================================
# ERROR TESTS
# =============================================================================


class TestValuePortfolioErrors:
    """Tests for error responses."""

    def test_invalid_address_returns_400(self, client: TestClient, price_provider):
        """
        GIVEN a malformed wallet address
        WHEN I POST holdings
        THEN response is 400 and no price lookup happens
        """
        response = client.post("/api/portfolio/not-a-wallet", json={
            "tokens": [holding(MINT_A, 5)],
        })

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"
        assert "Invalid Solana wallet address" in response.json()["message"]
        assert price_provider.call_count == 0

    def test_negative_balance_returns_422(self, client: TestClient):
        response = client.post(f"/api/portfolio/{WALLET_ADDRESS}", json={
            "tokens": [{"mint": MINT_A, "balance": -1, "decimals": 6}],
        })

        assert response.status_code == 422

    def test_price_outage_returns_degraded(self, client: TestClient, aggregator_factory):
        """
        GIVEN the price service is down
        WHEN I POST holdings
        THEN response is 200 with pricingStatus degraded and unpriced tokens
        """
        degraded = aggregator_factory(FailingPriceProvider())
        app.dependency_overrides[get_portfolio_aggregator] = lambda: degraded

        response = client.post(f"/api/portfolio/{WALLET_ADDRESS}", json={
            "tokens": [holding(MINT_A, 5)],
        })

        assert response.status_code == 200
        data = response.json()
        assert data["pricingStatus"] == "degraded"
        assert data["pricingError"]
        assert data["tokens"][0]["value"] is None
        assert data["tokenCount"] == 1


# =============================================================================
# SERVICE ENDPOINT TESTS
# =============================================================================


class TestServiceEndpoints:
    """Tests for health and root endpoints."""

    def test_health(self, client: TestClient):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_root(self, client: TestClient):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["docs"] == "/docs"
