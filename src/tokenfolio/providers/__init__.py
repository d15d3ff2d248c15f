"""Market data providers module."""

from tokenfolio.providers.market_data_provider import (
    PriceProvider,
    LiquidityProvider,
    PairProvider,
    MetadataProvider,
)
from tokenfolio.providers.jupiter_provider import (
    JupiterPriceProvider,
    JupiterTokenMetadataProvider,
    normalize_price_payload,
)
from tokenfolio.providers.dexscreener_provider import DexScreenerProvider
from tokenfolio.providers.stub_provider import StubMarketDataProvider

__all__ = [
    "PriceProvider",
    "LiquidityProvider",
    "PairProvider",
    "MetadataProvider",
    "JupiterPriceProvider",
    "JupiterTokenMetadataProvider",
    "normalize_price_payload",
    "DexScreenerProvider",
    "StubMarketDataProvider",
]
