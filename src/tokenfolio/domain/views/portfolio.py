"""View models for valuation outputs."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from tokenfolio.domain.models import (
    LiquidityVerdict,
    PriceSource,
    PricingStatus,
    Token,
)


@dataclass(frozen=True)
class PriceMap:
    """Prices read from one upstream response, tagged with the shape they came from."""

    source: PriceSource
    prices: dict[str, float] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> "PriceMap":
        return cls(source=PriceSource.UNRECOGNIZED)


@dataclass
class PriceResolution:
    """Result of resolving prices for a list of mints."""

    success: bool
    prices: dict[str, float] = field(default_factory=dict)
    error: Optional[str] = None
    cached_count: int = 0
    fetched_count: int = 0
    failed_batches: int = 0


@dataclass(frozen=True)
class LiquidityDecision:
    """Verdict for a single token plus the evidence behind it."""

    verdict: LiquidityVerdict
    reason: str
    liquidity_usd: Optional[float] = None

    @property
    def rejected(self) -> bool:
        return self.verdict == LiquidityVerdict.REJECT


@dataclass
class Portfolio:
    """Valued, filtered snapshot for one wallet address."""

    address: str
    tokens: list[Token] = field(default_factory=list)
    total_value: float = 0.0
    token_count: int = 0
    last_updated: Optional[datetime] = None
    pricing_status: PricingStatus = PricingStatus.OK
    pricing_error: Optional[str] = None

    @property
    def degraded(self) -> bool:
        return self.pricing_status == PricingStatus.DEGRADED
