"""Portfolio valuation API: POST /api/portfolio/{address}."""

from fastapi import APIRouter, Depends

from tokenfolio.api.deps import get_portfolio_aggregator
from tokenfolio.api.schemas import PortfolioResponse, ValuationRequest
from tokenfolio.services import PortfolioAggregator

router = APIRouter(prefix="/api/portfolio", tags=["portfolio"])


@router.post(
    "/{address}",
    response_model=PortfolioResponse,
    response_model_by_alias=True,
)
async def value_portfolio(
    address: str,
    request: ValuationRequest,
    aggregator: PortfolioAggregator = Depends(get_portfolio_aggregator),
) -> PortfolioResponse:
    """
    Price and filter a wallet's holdings.

    - address: wallet address (base58, 32 to 44 chars); 400 if malformed.
    - body: {"tokens": [...]} as produced by the chain scan.
    - Response: tokens ranked allowlisted-first then by value, totalValue,
      tokenCount, lastUpdated. pricingStatus is "degraded" when the price
      service was unavailable and tokens are returned unpriced.
    """
    holdings = [t.to_domain() for t in request.tokens]
    portfolio = await aggregator.build_portfolio(address, holdings)
    return PortfolioResponse.from_domain(portfolio)
