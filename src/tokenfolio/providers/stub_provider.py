"""Stub market data provider for offline/testing use."""

import random
from typing import Optional

from tokenfolio.config.settings import SOL_MINT, USDC_MINT, USDT_MINT
from tokenfolio.domain.models import PriceSource, TokenMetadata
from tokenfolio.domain.views import PriceMap

JUP_MINT = "JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN"
BONK_MINT = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"

# Deterministic fake data for well-known mints: (price, liquidity, symbol, name)
_STUB_TOKENS: dict[str, tuple[float, float, str, str]] = {
    SOL_MINT: (150.25, 450_000_000.0, "SOL", "Wrapped SOL"),
    USDC_MINT: (1.0, 900_000_000.0, "USDC", "USD Coin"),
    USDT_MINT: (1.0, 250_000_000.0, "USDT", "USDT"),
    JUP_MINT: (0.85, 40_000_000.0, "JUP", "Jupiter"),
    BONK_MINT: (0.000021, 25_000_000.0, "Bonk", "Bonk"),
}


class StubMarketDataProvider:
    """
    Stub provider with deterministic fake data for offline operation.

    Uses predefined data for well-known mints; unknown mints get a seeded
    random price and liquidity, so repeated runs with the same seed agree.
    Implements the price, liquidity, pair and metadata protocols.
    """

    def __init__(self, seed: int = 42):
        """Initialize with optional random seed for reproducibility."""
        self._seed = seed

    def _rng_for(self, mint: str) -> random.Random:
        # Seeded per mint so the answer does not depend on call order
        return random.Random(f"{self._seed}:{mint}")

    async def fetch_prices(self, mints: list[str]) -> PriceMap:
        """Return stub prices for requested mints."""
        prices: dict[str, float] = {}
        for mint in mints:
            if mint in _STUB_TOKENS:
                prices[mint] = _STUB_TOKENS[mint][0]
            else:
                prices[mint] = round(0.0001 + self._rng_for(mint).random() * 5, 6)
        return PriceMap(source=PriceSource.PRICES_MAP, prices=prices)

    async def get_liquidity(self, mint: str) -> Optional[float]:
        """Return stub liquidity; unknown mints get 0 to 5,000 USD."""
        if mint in _STUB_TOKENS:
            return _STUB_TOKENS[mint][1]
        return round(self._rng_for(mint).random() * 5_000, 2)

    async def has_pairs(self, mint: str) -> bool:
        """Every stub mint trades somewhere."""
        return True

    async def get_metadata(self, mint: str) -> Optional[TokenMetadata]:
        """Labels for well-known mints only."""
        if mint not in _STUB_TOKENS:
            return None
        _, _, symbol, name = _STUB_TOKENS[mint]
        return TokenMetadata(symbol=symbol, name=name)
