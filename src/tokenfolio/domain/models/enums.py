"""Domain enumerations."""

from enum import Enum


class CacheCategory(str, Enum):
    """Cache categories, each with its own expiry."""

    PRICES = "prices"
    METADATA = "metadata"


class PriceSource(str, Enum):
    """Which upstream response shape a price map was read from."""

    PRICES_MAP = "prices_map"  # {"prices": {mint: number}}
    DATA_MAP = "data_map"  # {"data": {mint: {"price": number}}}
    UNRECOGNIZED = "unrecognized"


class LiquidityVerdict(str, Enum):
    """Outcome of liquidity screening for one token."""

    TRUST = "trust"
    REJECT = "reject"
    TRUST_WITHOUT_DEEP_CHECK = "trust_without_deep_check"


class PricingStatus(str, Enum):
    """Whether a portfolio carries prices or fell back to unpriced tokens."""

    OK = "ok"
    DEGRADED = "degraded"
