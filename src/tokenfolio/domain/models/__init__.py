"""Domain models package."""

from tokenfolio.domain.models.enums import (
    CacheCategory,
    PriceSource,
    LiquidityVerdict,
    PricingStatus,
)
from tokenfolio.domain.models.token import Token, TokenMetadata, coerce_price
from tokenfolio.domain.models.cache import CacheEntry

__all__ = [
    "CacheCategory",
    "PriceSource",
    "LiquidityVerdict",
    "PricingStatus",
    "Token",
    "TokenMetadata",
    "coerce_price",
    "CacheEntry",
]
