"""Core utilities and shared functionality."""

from tokenfolio.core.timezone import (
    now_utc,
    to_utc,
    parse_datetime_utc,
    UTC_TZ,
)
from tokenfolio.core.exceptions import (
    AppError,
    ValidationError,
    UpstreamError,
    PortfolioUnavailableError,
    CacheWriteError,
)

__all__ = [
    "now_utc",
    "to_utc",
    "parse_datetime_utc",
    "UTC_TZ",
    "AppError",
    "ValidationError",
    "UpstreamError",
    "PortfolioUnavailableError",
    "CacheWriteError",
]
