"""Portfolio aggregation: price, screen, rank and total a wallet's holdings."""

import asyncio
import logging
import re
from dataclasses import replace
from datetime import datetime
from typing import Awaitable, Callable, Optional

from tokenfolio.core.exceptions import AppError, PortfolioUnavailableError, ValidationError
from tokenfolio.core.timezone import now_utc
from tokenfolio.domain.models import PricingStatus, Token
from tokenfolio.domain.views import Portfolio
from tokenfolio.services.liquidity_verifier import LiquidityVerifier
from tokenfolio.services.metadata_service import MetadataService
from tokenfolio.services.price_resolver import BatchPriceResolver

logger = logging.getLogger(__name__)

# Base58, 32 to 44 characters
WALLET_ADDRESS_PATTERN = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")


def validate_wallet_address(address: str) -> str:
    """Return the stripped address or raise ValidationError."""
    candidate = (address or "").strip()
    if not WALLET_ADDRESS_PATTERN.match(candidate):
        raise ValidationError("Invalid Solana wallet address format")
    return candidate


class PortfolioAggregator:
    """
    Orchestrates valuation for one wallet.

    Steps: copy holdings, fill labels, resolve prices, attach price/value,
    screen each priced token, drop rejected tokens, rank (allowlisted first,
    then by value descending) and total.

    If price resolution fails outright the holdings come back unpriced with
    pricing_status DEGRADED, so the token count stays stable.
    """

    def __init__(
        self,
        price_resolver: BatchPriceResolver,
        liquidity_verifier: LiquidityVerifier,
        metadata_service: Optional[MetadataService] = None,
        liquidity_check_delay_seconds: float = 0.5,
        include_unpriced_tokens: bool = True,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._price_resolver = price_resolver
        self._verifier = liquidity_verifier
        self._metadata_service = metadata_service
        self._check_delay = liquidity_check_delay_seconds
        self._include_unpriced = include_unpriced_tokens
        self._sleep = sleep
        self._clock = clock

    async def build_portfolio(self, address: str, holdings: list[Token]) -> Portfolio:
        """
        Build the valued, filtered snapshot for a wallet.

        Raises:
            ValidationError: malformed wallet address (before any network call).
            PortfolioUnavailableError: anything unexpected; the original message is kept.
        """
        address = validate_wallet_address(address)
        try:
            return await self._build(address, holdings)
        except AppError:
            raise
        except Exception as exc:
            logger.exception("Portfolio for %s could not be computed", address)
            raise PortfolioUnavailableError(str(exc) or type(exc).__name__) from exc

    async def _build(self, address: str, holdings: list[Token]) -> Portfolio:
        # Work on copies; the caller's tokens are never touched
        tokens = [replace(t) for t in holdings]
        for token in tokens:
            token.clear_price()

        if not tokens:
            return self._snapshot(address, [])

        mints = list(dict.fromkeys(t.mint for t in tokens))
        if self._metadata_service is not None:
            metadata = await self._metadata_service.resolve(mints)
            for token in tokens:
                if token.mint in metadata:
                    token.apply_metadata(metadata[token.mint])

        resolution = await self._price_resolver.resolve(mints)
        if not resolution.success:
            logger.warning(
                "Pricing unavailable for %s, returning %d unpriced tokens: %s",
                address,
                len(tokens),
                resolution.error,
            )
            return self._snapshot(
                address,
                self._rank(tokens),
                pricing_status=PricingStatus.DEGRADED,
                pricing_error=resolution.error,
            )

        retained: list[Token] = []
        network_checks = 0
        for token in tokens:
            price = resolution.prices.get(token.mint)
            if price is None:
                if self._include_unpriced:
                    retained.append(token)
                continue

            token.apply_price(price)
            if self._verifier.needs_network_check(token):
                if network_checks > 0:
                    await self._sleep(self._check_delay)
                network_checks += 1

            decision = await self._verifier.verify(token)
            if decision.rejected:
                logger.info(
                    "Filtering out %s (value $%.2f): %s",
                    token.label,
                    token.value,
                    decision.reason,
                )
                token.clear_price()
                continue
            retained.append(token)

        logger.info(
            "Portfolio %s: %d of %d tokens retained, %d priced",
            address,
            len(retained),
            len(tokens),
            len(resolution.prices),
        )
        return self._snapshot(address, self._rank(retained))

    def _rank(self, tokens: list[Token]) -> list[Token]:
        """Allowlisted first, then by value descending; unpriced last within each group."""
        return sorted(
            tokens,
            key=lambda t: (
                not self._verifier.is_allowlisted(t.mint),
                -(t.value if t.value is not None else -1.0),
            ),
        )

    def _snapshot(
        self,
        address: str,
        tokens: list[Token],
        pricing_status: PricingStatus = PricingStatus.OK,
        pricing_error: Optional[str] = None,
    ) -> Portfolio:
        total_value = sum((t.value for t in tokens if t.value is not None), 0.0)
        return Portfolio(
            address=address,
            tokens=tokens,
            total_value=total_value,
            token_count=len(tokens),
            last_updated=self._clock(),
            pricing_status=pricing_status,
            pricing_error=pricing_error,
        )
