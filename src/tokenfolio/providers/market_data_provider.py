"""Market data provider protocols."""

from typing import Optional, Protocol

from tokenfolio.domain.models import TokenMetadata
from tokenfolio.domain.views import PriceMap


class PriceProvider(Protocol):
    """
    Protocol for USD price sources.

    Implementations fetch one batch per call and raise UpstreamError when the
    request or its payload fails; mints with no price are omitted.
    """

    async def fetch_prices(self, mints: list[str]) -> PriceMap:
        """Fetch prices for one batch of mints."""
        ...


class LiquidityProvider(Protocol):
    """Protocol for the deep-check liquidity source."""

    async def get_liquidity(self, mint: str) -> Optional[float]:
        """
        Return tracked USD liquidity for a mint.

        None means the source has no record of the mint at all.
        """
        ...


class PairProvider(Protocol):
    """Protocol for the market-pair source used by the lighter check."""

    async def has_pairs(self, mint: str) -> bool:
        """Return True if at least one tradable pair exists."""
        ...


class MetadataProvider(Protocol):
    """Protocol for token label lookups."""

    async def get_metadata(self, mint: str) -> Optional[TokenMetadata]:
        """Return symbol/name/icon for a mint, or None if unknown."""
        ...
