"""Liquidity screening for priced tokens."""

import logging
from typing import Iterable

from tokenfolio.core.exceptions import UpstreamError
from tokenfolio.domain.models import LiquidityVerdict, Token
from tokenfolio.domain.views import LiquidityDecision
from tokenfolio.providers.market_data_provider import LiquidityProvider, PairProvider

logger = logging.getLogger(__name__)

DEFAULT_LOW_VALUE_THRESHOLD_USD = 10.0
DEFAULT_HIGH_VALUE_THRESHOLD_USD = 10_000.0
DEFAULT_MIN_LIQUIDITY_USD = 1_000.0


class LiquidityVerifier:
    """
    Decides whether a token's price can be trusted.

    Rules, first match wins:
    1. Allowlisted mint: trust.
    2. value <= low threshold: trust without a deep check.
    3. value > high threshold: deep check against the liquidity source.
       No record at all rejects; liquidity below the minimum rejects;
       a failed lookup trusts (fail open).
    4. Otherwise: pair check. No pairs rejects; a failed lookup trusts.
    """

    def __init__(
        self,
        liquidity_provider: LiquidityProvider,
        pair_provider: PairProvider,
        allowlist: Iterable[str],
        low_value_threshold_usd: float = DEFAULT_LOW_VALUE_THRESHOLD_USD,
        high_value_threshold_usd: float = DEFAULT_HIGH_VALUE_THRESHOLD_USD,
        min_liquidity_usd: float = DEFAULT_MIN_LIQUIDITY_USD,
    ):
        if low_value_threshold_usd > high_value_threshold_usd:
            raise ValueError("low_value_threshold_usd must not exceed high_value_threshold_usd")
        self._liquidity_provider = liquidity_provider
        self._pair_provider = pair_provider
        self._allowlist = frozenset(allowlist)
        self._low = low_value_threshold_usd
        self._high = high_value_threshold_usd
        self._min_liquidity = min_liquidity_usd

    def is_allowlisted(self, mint: str) -> bool:
        return mint in self._allowlist

    def needs_network_check(self, token: Token) -> bool:
        """True if verify() will call the liquidity or pair source."""
        if self.is_allowlisted(token.mint) or token.value is None:
            return False
        return token.value > self._low

    async def verify(self, token: Token) -> LiquidityDecision:
        """Return the verdict for a single priced token."""
        if self.is_allowlisted(token.mint):
            return LiquidityDecision(LiquidityVerdict.TRUST, "allowlisted")

        value = token.value
        if value is None:
            return LiquidityDecision(LiquidityVerdict.TRUST_WITHOUT_DEEP_CHECK, "unpriced")
        if value <= self._low:
            return LiquidityDecision(
                LiquidityVerdict.TRUST_WITHOUT_DEEP_CHECK,
                f"value ${value:,.2f} at or below ${self._low:,.2f}",
            )
        if value > self._high:
            return await self._deep_check(token)
        return await self._pair_check(token)

    async def _deep_check(self, token: Token) -> LiquidityDecision:
        try:
            liquidity = await self._liquidity_provider.get_liquidity(token.mint)
        except UpstreamError as exc:
            logger.warning(
                "Liquidity lookup failed for %s, keeping it: %s", token.label, exc.message
            )
            return LiquidityDecision(LiquidityVerdict.TRUST, "liquidity lookup failed")

        if liquidity is None:
            return LiquidityDecision(LiquidityVerdict.REJECT, "no liquidity record")
        if liquidity < self._min_liquidity:
            return LiquidityDecision(
                LiquidityVerdict.REJECT,
                f"liquidity ${liquidity:,.2f} below ${self._min_liquidity:,.2f}",
                liquidity_usd=liquidity,
            )
        return LiquidityDecision(
            LiquidityVerdict.TRUST,
            f"liquidity ${liquidity:,.2f}",
            liquidity_usd=liquidity,
        )

    async def _pair_check(self, token: Token) -> LiquidityDecision:
        try:
            has_pairs = await self._pair_provider.has_pairs(token.mint)
        except UpstreamError as exc:
            logger.warning("Pair lookup failed for %s, keeping it: %s", token.label, exc.message)
            return LiquidityDecision(LiquidityVerdict.TRUST, "pair lookup failed")

        if not has_pairs:
            return LiquidityDecision(LiquidityVerdict.REJECT, "no market pairs")
        return LiquidityDecision(LiquidityVerdict.TRUST, "market pairs found")
