"""Dependency injection for FastAPI."""

from fastapi import Depends

from tokenfolio.context import PipelineContext, get_pipeline_context
from tokenfolio.services import PortfolioAggregator


def get_context() -> PipelineContext:
    """Provide the shared PipelineContext."""
    return get_pipeline_context()


def get_portfolio_aggregator(
    context: PipelineContext = Depends(get_context),
) -> PortfolioAggregator:
    """Provide PortfolioAggregator instance."""
    return context.aggregator
