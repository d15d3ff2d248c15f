"""API routers."""

from tokenfolio.api.routers.portfolio import router as portfolio_router

__all__ = [
    "portfolio_router",
]
