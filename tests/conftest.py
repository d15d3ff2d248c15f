"""
Pytest configuration and fixtures for valuation pipeline tests.

This module provides:
- A controllable UTC clock and a recording sleep
- JSON-file and in-memory SQLite cache repositories
- Deterministic fake price, liquidity, pair and metadata providers
- Service fixtures wired to the fakes
- Token factory helpers
- A FastAPI test client wired to the fakes
"""

from datetime import datetime, timedelta
from typing import Callable, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, StaticPool
from sqlalchemy.orm import sessionmaker, Session

from tokenfolio.api.deps import get_portfolio_aggregator
from tokenfolio.config.settings import reset_settings, USDC_MINT, SOL_MINT
from tokenfolio.core.exceptions import UpstreamError
from tokenfolio.core.timezone import UTC_TZ
from tokenfolio.domain.models import PriceSource, Token, TokenMetadata
from tokenfolio.domain.views import PriceMap
from tokenfolio.main import app
from tokenfolio.repositories import JsonFileCacheRepository
from tokenfolio.repositories.sqlalchemy import Base, SqlAlchemyCacheRepository
# Import ORM models to register them with Base before creating tables
from tokenfolio.repositories.sqlalchemy import orm_models  # noqa: F401
from tokenfolio.services import (
    BatchPriceResolver,
    LiquidityVerifier,
    MetadataService,
    PortfolioAggregator,
)


WALLET_ADDRESS = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"

MINT_A = "AAAAmintAAAAmintAAAAmintAAAAmintAAAAmint1111"
MINT_B = "BBBBmintBBBBmintBBBBmintBBBBmintBBBBmint2222"
MINT_C = "CCCCmintCCCCmintCCCCmintCCCCmintCCCCmint3333"
MINT_D = "DDDDmintDDDDmintDDDDmintDDDDmintDDDDmint4444"

ALLOWLIST = [SOL_MINT, USDC_MINT]


# =============================================================================
# TIME HELPERS
# =============================================================================


def utc_datetime(
    year: int,
    month: int,
    day: int,
    hour: int = 12,
    minute: int = 0,
    second: int = 0,
) -> datetime:
    """Create a localized datetime in UTC."""
    return UTC_TZ.localize(datetime(year, month, day, hour, minute, second))


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or utc_datetime(2024, 6, 15, 14, 30, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture(autouse=True)
def _reset_settings():
    """Every test starts from freshly loaded settings."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def clock() -> FakeClock:
    """Controllable clock fixed at 2024-06-15 14:30 UTC."""
    return FakeClock()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    """Sleep replacement that returns immediately."""
    return RecordingSleep()


# =============================================================================
# CACHE FIXTURES
# =============================================================================


@pytest.fixture
def cache_repo(tmp_path, clock) -> JsonFileCacheRepository:
    """JSON-file cache in a temp directory (5 min prices, 1 day metadata)."""
    return JsonFileCacheRepository(
        tmp_path / "cache",
        price_ttl_seconds=300,
        metadata_ttl_seconds=86_400,
        clock=clock,
    )


@pytest.fixture(scope="function")
def test_engine():
    """Create test database engine with shared in-memory SQLite."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def test_session(test_engine) -> Session:
    """Create test database session."""
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sql_cache_repo(test_session, clock) -> SqlAlchemyCacheRepository:
    """SQLite-backed cache with the same expiries as cache_repo."""
    return SqlAlchemyCacheRepository(
        test_session,
        price_ttl_seconds=300,
        metadata_ttl_seconds=86_400,
        clock=clock,
    )


# =============================================================================
# PROVIDER FAKES
# =============================================================================


class FakePriceProvider:
    """
    Deterministic price provider for testing.

    Returns prices from a fixed table and records every batch it receives.
    Batches listed in fail_batches (0-based call index) raise UpstreamError.
    """

    def __init__(
        self,
        prices: Optional[dict[str, float]] = None,
        source: PriceSource = PriceSource.PRICES_MAP,
        fail_batches: Optional[set[int]] = None,
    ):
        self.prices = dict(prices or {})
        self.source = source
        self.fail_batches = set(fail_batches or ())
        self.batches: list[list[str]] = []

    async def fetch_prices(self, mints: list[str]) -> PriceMap:
        call_index = len(self.batches)
        self.batches.append(list(mints))
        if call_index in self.fail_batches:
            raise UpstreamError("price service", "Network unavailable")
        return PriceMap(
            source=self.source,
            prices={m: self.prices[m] for m in mints if m in self.prices},
        )

    @property
    def call_count(self) -> int:
        return len(self.batches)


class FailingPriceProvider:
    """Price provider that always raises an upstream error."""

    def __init__(self):
        self.call_count = 0

    async def fetch_prices(self, mints: list[str]) -> PriceMap:
        self.call_count += 1
        raise UpstreamError("price service", "Network unavailable")


class FakeLiquidityProvider:
    """
    Liquidity and pair source for testing.

    liquidity: mint -> USD liquidity (a mint missing here has no record).
    pairs: mints that have market pairs.
    failing: mints whose lookups raise UpstreamError.
    """

    def __init__(
        self,
        liquidity: Optional[dict[str, float]] = None,
        pairs: Optional[set[str]] = None,
        failing: Optional[set[str]] = None,
    ):
        self.liquidity = dict(liquidity or {})
        self.pairs = set(pairs or ())
        self.failing = set(failing or ())
        self.liquidity_calls: list[str] = []
        self.pair_calls: list[str] = []

    async def get_liquidity(self, mint: str) -> Optional[float]:
        self.liquidity_calls.append(mint)
        if mint in self.failing:
            raise UpstreamError("liquidity service", "Connection reset by peer")
        return self.liquidity.get(mint)

    async def has_pairs(self, mint: str) -> bool:
        self.pair_calls.append(mint)
        if mint in self.failing:
            raise UpstreamError("pair service", "Connection reset by peer")
        return mint in self.pairs


class FakeMetadataProvider:
    """Metadata provider backed by a fixed table."""

    def __init__(
        self,
        metadata: Optional[dict[str, TokenMetadata]] = None,
        failing: Optional[set[str]] = None,
    ):
        self.metadata = dict(metadata or {})
        self.failing = set(failing or ())
        self.calls: list[str] = []

    async def get_metadata(self, mint: str) -> Optional[TokenMetadata]:
        self.calls.append(mint)
        if mint in self.failing:
            raise UpstreamError("metadata service", "timed out")
        return self.metadata.get(mint)


@pytest.fixture
def price_provider() -> FakePriceProvider:
    """Price provider knowing MINT_A..MINT_C, SOL and USDC."""
    return FakePriceProvider(
        prices={
            MINT_A: 1.0,
            MINT_B: 2.0,
            MINT_C: 0.5,
            SOL_MINT: 150.0,
            USDC_MINT: 1.0,
        }
    )


@pytest.fixture
def liquidity_provider() -> FakeLiquidityProvider:
    """Liquidity source with no records by default."""
    return FakeLiquidityProvider()


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def price_resolver(price_provider, cache_repo, recording_sleep) -> BatchPriceResolver:
    """Provide test BatchPriceResolver."""
    return BatchPriceResolver(
        provider=price_provider,
        cache_repo=cache_repo,
        batch_size=100,
        batch_delay_seconds=1.0,
        sleep=recording_sleep,
    )


@pytest.fixture
def liquidity_verifier(liquidity_provider) -> LiquidityVerifier:
    """Provide test LiquidityVerifier with design thresholds."""
    return LiquidityVerifier(
        liquidity_provider=liquidity_provider,
        pair_provider=liquidity_provider,
        allowlist=ALLOWLIST,
        low_value_threshold_usd=10.0,
        high_value_threshold_usd=10_000.0,
        min_liquidity_usd=1_000.0,
    )


@pytest.fixture
def metadata_service(cache_repo, recording_sleep) -> MetadataService:
    """Provide test MetadataService with labels for SOL only."""
    return MetadataService(
        provider=FakeMetadataProvider({SOL_MINT: TokenMetadata(symbol="SOL", name="Wrapped SOL")}),
        cache_repo=cache_repo,
        request_delay_seconds=0.2,
        sleep=recording_sleep,
    )


@pytest.fixture
def aggregator_factory(
    cache_repo,
    liquidity_verifier,
    recording_sleep,
    clock,
) -> Callable[..., PortfolioAggregator]:
    """Factory for aggregators around a given price provider."""

    def _create(
        provider,
        verifier: Optional[LiquidityVerifier] = None,
        metadata_service: Optional[MetadataService] = None,
        include_unpriced_tokens: bool = True,
    ) -> PortfolioAggregator:
        resolver = BatchPriceResolver(
            provider=provider,
            cache_repo=cache_repo,
            batch_delay_seconds=1.0,
            sleep=recording_sleep,
        )
        return PortfolioAggregator(
            price_resolver=resolver,
            liquidity_verifier=verifier or liquidity_verifier,
            metadata_service=metadata_service,
            liquidity_check_delay_seconds=0.5,
            include_unpriced_tokens=include_unpriced_tokens,
            sleep=recording_sleep,
            clock=clock,
        )

    return _create


# =============================================================================
# FACTORY HELPERS
# =============================================================================


def make_token(
    mint: str,
    ui_balance: float,
    decimals: int = 6,
    price: Optional[float] = None,
    symbol: Optional[str] = None,
) -> Token:
    """Build a holding with a given UI balance (raw balance derived)."""
    token = Token(
        mint=mint,
        balance=int(round(ui_balance * (10 ** decimals))),
        decimals=decimals,
        ui_balance=ui_balance,
        symbol=symbol,
    )
    if price is not None:
        token.apply_price(price)
    return token


def make_mints(count: int, prefix: str = "Mint") -> list[str]:
    """Generate distinct fake mint identifiers."""
    return [f"{prefix}{i:06d}" for i in range(count)]


# =============================================================================
# API FIXTURES
# =============================================================================


@pytest.fixture
def api_aggregator(aggregator_factory, price_provider) -> PortfolioAggregator:
    """Aggregator served by the test client."""
    return aggregator_factory(price_provider)


@pytest.fixture
def client(api_aggregator) -> TestClient:
    """Provide FastAPI test client backed by the fake providers."""
    app.dependency_overrides[get_portfolio_aggregator] = lambda: api_aggregator
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
