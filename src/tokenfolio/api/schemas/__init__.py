"""API request/response schemas."""

from tokenfolio.api.schemas.portfolio import (
    TokenHolding,
    ValuationRequest,
    TokenResponse,
    PortfolioResponse,
)

__all__ = [
    "TokenHolding",
    "ValuationRequest",
    "TokenResponse",
    "PortfolioResponse",
]
