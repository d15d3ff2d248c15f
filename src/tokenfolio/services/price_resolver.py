"""Batch price resolution with a cache in front of the price service."""

import asyncio
import logging
from typing import Awaitable, Callable, Iterator

from tokenfolio.config.settings import MAX_PRICE_BATCH_SIZE
from tokenfolio.core.exceptions import CacheWriteError, UpstreamError
from tokenfolio.domain.models import CacheCategory, coerce_price
from tokenfolio.domain.views import PriceResolution
from tokenfolio.providers.market_data_provider import PriceProvider
from tokenfolio.repositories.protocols import CacheRepository

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


def chunked(items: list[str], size: int) -> Iterator[list[str]]:
    """Yield consecutive slices of at most `size` items."""
    for start in range(0, len(items), size):
        yield items[start:start + size]


class BatchPriceResolver:
    """
    Resolves USD prices for many mints while bounding upstream traffic.

    Cached prices are served as-is; only misses go upstream, in batches of
    at most 100 mints with a pause between batches. The price cache is
    written once per call, after all batches.
    """

    def __init__(
        self,
        provider: PriceProvider,
        cache_repo: CacheRepository,
        batch_size: int = MAX_PRICE_BATCH_SIZE,
        batch_delay_seconds: float = 1.0,
        sleep: Sleep = asyncio.sleep,
    ):
        if not 1 <= batch_size <= MAX_PRICE_BATCH_SIZE:
            raise ValueError(f"batch_size must be between 1 and {MAX_PRICE_BATCH_SIZE}")
        self._provider = provider
        self._cache_repo = cache_repo
        self._batch_size = batch_size
        self._batch_delay = batch_delay_seconds
        self._sleep = sleep

    async def resolve(self, mints: list[str]) -> PriceResolution:
        """
        Return prices for exactly the requested mints.

        Mints with no discoverable price are left out. A failed batch only
        loses that batch's prices; success is False when the batch stage
        fails outright or when nothing at all could be priced because every
        batch failed.
        """
        if not mints:
            return PriceResolution(success=True)
        try:
            return await self._resolve(mints)
        except Exception as exc:
            logger.exception("Price resolution failed for %d mints", len(mints))
            return PriceResolution(success=False, error=str(exc) or type(exc).__name__)

    async def _resolve(self, mints: list[str]) -> PriceResolution:
        price_map = self._load_cached_prices()
        missing = [m for m in mints if m not in price_map]
        cached_count = len(mints) - len(missing)

        batches = list(chunked(missing, self._batch_size))
        fetched: dict[str, float] = {}
        failed_batches = 0
        last_error = None

        for index, batch in enumerate(batches):
            if index > 0:
                await self._sleep(self._batch_delay)
            try:
                result = await self._provider.fetch_prices(batch)
            except UpstreamError as exc:
                failed_batches += 1
                last_error = exc.message
                logger.warning(
                    "Price batch %d/%d (%d mints) failed: %s",
                    index + 1,
                    len(batches),
                    len(batch),
                    exc.message,
                )
                continue
            logger.debug(
                "Price batch %d/%d: %d prices (%s)",
                index + 1,
                len(batches),
                len(result.prices),
                result.source.value,
            )
            fetched.update(result.prices)
            price_map.update(result.prices)

        if fetched:
            self._save_prices(fetched)

        prices = {m: price_map[m] for m in mints if m in price_map}
        logger.info(
            "Resolved %d/%d prices (%d cached, %d batches, %d failed)",
            len(prices),
            len(mints),
            cached_count,
            len(batches),
            failed_batches,
        )

        if batches and failed_batches == len(batches) and not prices:
            return PriceResolution(
                success=False,
                error=last_error,
                failed_batches=failed_batches,
            )
        return PriceResolution(
            success=True,
            prices=prices,
            error=last_error,
            cached_count=cached_count,
            fetched_count=len(fetched),
            failed_batches=failed_batches,
        )

    def _load_cached_prices(self) -> dict[str, float]:
        cached = self._cache_repo.load(CacheCategory.PRICES) or {}
        prices = {}
        for mint, raw in cached.items():
            price = coerce_price(raw)
            if price is not None:
                prices[mint] = price
        return prices

    def _save_prices(self, fetched: dict[str, float]) -> None:
        # Cached prices keep their original expiry
        try:
            self._cache_repo.merge(CacheCategory.PRICES, fetched)
        except CacheWriteError as exc:
            logger.warning("Price cache not persisted: %s", exc.message)
