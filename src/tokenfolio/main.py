"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from tokenfolio.config.settings import get_settings
from tokenfolio.config.logging_config import setup_logging
from tokenfolio.context import get_pipeline_context, set_pipeline_context
from tokenfolio.api.routers import portfolio_router
from tokenfolio.core.exceptions import AppError


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    setup_logging()
    yield
    # Shutdown: release HTTP connections and the cache session
    await get_pipeline_context().aclose()
    set_pipeline_context(None)


settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    description="Wallet token valuation with liquidity filtering",
    version=settings.app_version,
    lifespan=lifespan,
)

# Include routers
app.include_router(portfolio_router)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Global handler for application errors."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "message": exc.message},
    )


@app.get("/health")
def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/")
def root() -> dict[str, str]:
    """Root endpoint with API info."""
    return {
        "app": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }
