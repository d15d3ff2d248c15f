"""View models package."""

from tokenfolio.domain.views.portfolio import (
    PriceMap,
    PriceResolution,
    LiquidityDecision,
    Portfolio,
)

__all__ = [
    "PriceMap",
    "PriceResolution",
    "LiquidityDecision",
    "Portfolio",
]
