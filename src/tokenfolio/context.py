"""Pipeline context for in-process service management.

Builds the cache store, HTTP client, providers and services from Settings
and hands out shared instances. Used by the HTTP layer and by scripts that
run the pipeline directly.
"""

from typing import Optional

import httpx

from tokenfolio.config.settings import Settings, get_settings
from tokenfolio.http import RotatingHttpClient, build_identities
from tokenfolio.providers import (
    DexScreenerProvider,
    JupiterPriceProvider,
    JupiterTokenMetadataProvider,
    StubMarketDataProvider,
)
from tokenfolio.repositories import CacheRepository, JsonFileCacheRepository
from tokenfolio.repositories.sqlalchemy import (
    SqlAlchemyCacheRepository,
    get_session,
    init_db_with_path,
    reset_database,
)
from tokenfolio.services import (
    BatchPriceResolver,
    LiquidityVerifier,
    MetadataService,
    PortfolioAggregator,
)


class PipelineContext:
    """
    Lazily constructed, shared pipeline components.

    Call aclose() when done to release HTTP connections and the database
    session; a closed context is not reused.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            settings: Settings to build from. Uses the global settings if omitted.
            transport: Optional httpx transport for every outbound client.
        """
        self._settings = settings or get_settings()
        self._transport = transport
        self._session = None

        # Instances (lazy initialized)
        self._cache_repo: Optional[CacheRepository] = None
        self._http_client: Optional[RotatingHttpClient] = None
        self._stub_provider: Optional[StubMarketDataProvider] = None
        self._price_resolver: Optional[BatchPriceResolver] = None
        self._liquidity_verifier: Optional[LiquidityVerifier] = None
        self._metadata_service: Optional[MetadataService] = None
        self._aggregator: Optional[PortfolioAggregator] = None

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def cache_repo(self) -> CacheRepository:
        """Get the configured cache backend."""
        if self._cache_repo is None:
            settings = self._settings
            if settings.cache_backend == "sqlite":
                init_db_with_path(settings.get_cache_db_path())
                self._session = get_session()
                self._cache_repo = SqlAlchemyCacheRepository(
                    self._session,
                    price_ttl_seconds=settings.price_cache_ttl_seconds,
                    metadata_ttl_seconds=settings.metadata_cache_ttl_seconds,
                )
            else:
                self._cache_repo = JsonFileCacheRepository(
                    settings.get_data_dir(),
                    price_ttl_seconds=settings.price_cache_ttl_seconds,
                    metadata_ttl_seconds=settings.metadata_cache_ttl_seconds,
                )
        return self._cache_repo

    @property
    def http_client(self) -> RotatingHttpClient:
        """Get the shared rotating HTTP client."""
        if self._http_client is None:
            settings = self._settings
            self._http_client = RotatingHttpClient(
                build_identities(
                    settings.user_agents,
                    settings.proxy_urls,
                    origin=settings.request_origin,
                ),
                request_ceiling=settings.identity_request_ceiling,
                timeout_seconds=settings.http_timeout_seconds,
                transport=self._transport,
            )
        return self._http_client

    def _providers(self) -> tuple:
        """Return (price, liquidity, pairs, metadata) providers for the current mode."""
        settings = self._settings
        if settings.offline_mode:
            if self._stub_provider is None:
                self._stub_provider = StubMarketDataProvider()
            stub = self._stub_provider
            return stub, stub, stub, stub

        dexscreener = DexScreenerProvider(
            self.http_client,
            liquidity_url_template=settings.liquidity_api_url,
            pairs_url_template=settings.pairs_api_url,
        )
        return (
            JupiterPriceProvider(
                self.http_client,
                base_url=settings.price_api_url,
                query_param=settings.price_query_param,
            ),
            dexscreener,
            dexscreener,
            JupiterTokenMetadataProvider(self.http_client, settings.metadata_api_url),
        )

    @property
    def price_resolver(self) -> BatchPriceResolver:
        """Get the BatchPriceResolver instance."""
        if self._price_resolver is None:
            price_provider = self._providers()[0]
            self._price_resolver = BatchPriceResolver(
                provider=price_provider,
                cache_repo=self.cache_repo,
                batch_size=self._settings.price_batch_size,
                batch_delay_seconds=self._settings.price_batch_delay_seconds,
            )
        return self._price_resolver

    @property
    def liquidity_verifier(self) -> LiquidityVerifier:
        """Get the LiquidityVerifier instance."""
        if self._liquidity_verifier is None:
            settings = self._settings
            _, liquidity_provider, pair_provider, _ = self._providers()
            self._liquidity_verifier = LiquidityVerifier(
                liquidity_provider=liquidity_provider,
                pair_provider=pair_provider,
                allowlist=settings.allowlist,
                low_value_threshold_usd=settings.low_value_threshold_usd,
                high_value_threshold_usd=settings.high_value_threshold_usd,
                min_liquidity_usd=settings.min_liquidity_usd,
            )
        return self._liquidity_verifier

    @property
    def metadata_service(self) -> Optional[MetadataService]:
        """Get the MetadataService instance, or None when label lookups are off."""
        if not self._settings.resolve_metadata:
            return None
        if self._metadata_service is None:
            self._metadata_service = MetadataService(
                provider=self._providers()[3],
                cache_repo=self.cache_repo,
                request_delay_seconds=self._settings.metadata_request_delay_seconds,
            )
        return self._metadata_service

    @property
    def aggregator(self) -> PortfolioAggregator:
        """Get the PortfolioAggregator instance."""
        if self._aggregator is None:
            self._aggregator = PortfolioAggregator(
                price_resolver=self.price_resolver,
                liquidity_verifier=self.liquidity_verifier,
                metadata_service=self.metadata_service,
                liquidity_check_delay_seconds=self._settings.liquidity_check_delay_seconds,
                include_unpriced_tokens=self._settings.include_unpriced_tokens,
            )
        return self._aggregator

    async def aclose(self) -> None:
        """Clean up resources."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
        if self._session is not None:
            self._session.close()
            self._session = None
            reset_database()


# Global pipeline context (singleton for the HTTP app)
_context: Optional[PipelineContext] = None


def get_pipeline_context() -> PipelineContext:
    """Get or create the global pipeline context."""
    global _context
    if _context is None:
        _context = PipelineContext()
    return _context


def set_pipeline_context(context: Optional[PipelineContext]) -> None:
    """Set (or clear) the global pipeline context."""
    global _context
    _context = context
