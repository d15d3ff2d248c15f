"""Application settings and configuration.

Valuation policy (thresholds, allowlist, provider endpoints) lives here so it
can be changed through the environment without touching pipeline code.
"""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SOL_MINT = "So11111111111111111111111111111111111111112"
USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZsaAkJ9"
USDT_MINT = "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB"

# Native asset, major stables and a short list of prominent community tokens
DEFAULT_ALLOWLIST: list[str] = [
    SOL_MINT,
    USDC_MINT,
    USDT_MINT,
    "JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN",  # JUP
    "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263",  # BONK
    "EKpQGSJtjMFqKZ9KQanSqYXRcF8fBopzLHYxdM65zcjm",  # WIF
    "4k3Dyjzvzp8eMZWUXbBCjEvwSkkk59S5iCNLY3QrkX6R",  # RAY
    "jtojtomepa8beP8AuQc6eXt5FriJwfFMwQx2v2f9mCL",  # JTO
    "HZ1JovNiVvGrGNiiYvEozEVgZ58xaU3RKwX8eACQBCt3",  # PYTH
    "mSoLzYCxHdYgdzU16g5QSh3i5K3z3KZK7ytfqcJm7So",  # mSOL
    "J1toso1uCk3RLmjorhTtrVwY9HJ7X8V9yYac6Y7kGCPn",  # jitoSOL
]

DEFAULT_USER_AGENTS: list[str] = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:89.0) Gecko/20100101 Firefox/89.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/14.1.1 Safari/605.1.15",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Edge/91.0.864.59",
]

MAX_PRICE_BATCH_SIZE = 100


def get_default_data_dir() -> Path:
    """Return the default data directory for cache files."""
    return Path.home() / ".cache" / "tokenfolio"


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TOKENFOLIO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Tokenfolio"
    app_version: str = "0.1.0"
    log_level: str = "INFO"

    # Use deterministic stub providers instead of the network
    offline_mode: bool = False

    # Price service
    price_api_url: str = "https://fe-api.jup.ag/api/v1/prices"
    price_query_param: str = "list_address"
    price_batch_size: int = MAX_PRICE_BATCH_SIZE
    price_batch_delay_seconds: float = 1.0

    # Liquidity and pair sources ({mint} is substituted)
    liquidity_api_url: str = "https://api.dexscreener.com/latest/dex/tokens/{mint}"
    pairs_api_url: str = "https://api.dexscreener.com/token-pairs/v1/solana/{mint}"
    liquidity_check_delay_seconds: float = 0.5

    # Token metadata (symbol/name/icon)
    metadata_api_url: str = "https://tokens.jup.ag/token/{mint}"
    metadata_request_delay_seconds: float = 0.2
    resolve_metadata: bool = True

    # Liquidity policy
    low_value_threshold_usd: float = 10.0
    high_value_threshold_usd: float = 10_000.0
    min_liquidity_usd: float = 1_000.0
    allowlist: list[str] = Field(default_factory=lambda: list(DEFAULT_ALLOWLIST))
    include_unpriced_tokens: bool = True

    # Cache store
    cache_backend: Literal["json", "sqlite"] = "json"
    data_dir: Optional[Path] = None
    price_cache_ttl_seconds: int = 300
    metadata_cache_ttl_seconds: int = 86_400

    # Outbound requests
    http_timeout_seconds: float = 10.0
    identity_request_ceiling: int = 50
    user_agents: list[str] = Field(default_factory=lambda: list(DEFAULT_USER_AGENTS))
    proxy_urls: list[str] = Field(default_factory=list)
    request_origin: str = "https://portfolio.solana.tools"

    @field_validator("price_batch_size")
    @classmethod
    def _check_batch_size(cls, value: int) -> int:
        if not 1 <= value <= MAX_PRICE_BATCH_SIZE:
            raise ValueError(f"price_batch_size must be between 1 and {MAX_PRICE_BATCH_SIZE}")
        return value

    @field_validator(
        "low_value_threshold_usd",
        "high_value_threshold_usd",
        "min_liquidity_usd",
        "price_batch_delay_seconds",
        "liquidity_check_delay_seconds",
        "metadata_request_delay_seconds",
    )
    @classmethod
    def _check_non_negative(cls, value: float) -> float:
        if value < 0:
            raise ValueError("must be non-negative")
        return value

    @field_validator("user_agents")
    @classmethod
    def _check_user_agents(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("at least one user agent is required")
        return value

    @model_validator(mode="after")
    def _check_thresholds(self) -> "Settings":
        if self.low_value_threshold_usd > self.high_value_threshold_usd:
            raise ValueError("low_value_threshold_usd must not exceed high_value_threshold_usd")
        return self

    def get_data_dir(self) -> Path:
        """Get the data directory, creating it if needed."""
        data_dir = self.data_dir or get_default_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def get_cache_db_path(self) -> Path:
        """Get the SQLite file used by the sqlite cache backend."""
        return self.get_data_dir() / "cache.db"


# Global settings instance (can be replaced at runtime)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the current settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Set the global settings instance."""
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Reset settings to force reload."""
    global _settings
    _settings = None
