"""Service layer - valuation pipeline orchestration."""

from tokenfolio.services.price_resolver import BatchPriceResolver
from tokenfolio.services.liquidity_verifier import LiquidityVerifier
from tokenfolio.services.metadata_service import MetadataService
from tokenfolio.services.portfolio_aggregator import (
    PortfolioAggregator,
    validate_wallet_address,
)

__all__ = [
    "BatchPriceResolver",
    "LiquidityVerifier",
    "MetadataService",
    "PortfolioAggregator",
    "validate_wallet_address",
]
