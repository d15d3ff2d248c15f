"""Token label resolution through the metadata cache."""

import asyncio
import logging
from typing import Awaitable, Callable

from tokenfolio.core.exceptions import CacheWriteError, UpstreamError
from tokenfolio.domain.models import CacheCategory, TokenMetadata
from tokenfolio.providers.market_data_provider import MetadataProvider
from tokenfolio.repositories.protocols import CacheRepository

logger = logging.getLogger(__name__)


class MetadataService:
    """
    Resolves symbol, name and icon per mint.

    Labels change rarely, so they live in the long-lived metadata cache.
    Misses are looked up one at a time with a pause between requests; a
    failed lookup just leaves that mint unlabelled.
    """

    def __init__(
        self,
        provider: MetadataProvider,
        cache_repo: CacheRepository,
        request_delay_seconds: float = 0.2,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._provider = provider
        self._cache_repo = cache_repo
        self._delay = request_delay_seconds
        self._sleep = sleep

    async def resolve(self, mints: list[str]) -> dict[str, TokenMetadata]:
        """
        Return metadata for every mint that has any.

        Mints the token list does not know are cached as an empty entry, so
        they are not looked up again until the metadata cache expires.
        """
        cached = self._cache_repo.load(CacheCategory.METADATA) or {}
        result: dict[str, TokenMetadata] = {}
        missing: list[str] = []

        for mint in dict.fromkeys(mints):
            entry = cached.get(mint)
            if not isinstance(entry, dict):
                missing.append(mint)
            elif entry:
                result[mint] = TokenMetadata.from_dict(entry)

        fetched: dict[str, dict] = {}
        for index, mint in enumerate(missing):
            if index > 0:
                await self._sleep(self._delay)
            try:
                metadata = await self._provider.get_metadata(mint)
            except UpstreamError as exc:
                logger.warning("Metadata lookup failed for %s: %s", mint, exc.message)
                continue
            if metadata is None:
                fetched[mint] = {}
                continue
            fetched[mint] = metadata.to_dict()
            result[mint] = metadata

        if fetched:
            try:
                self._cache_repo.merge(CacheCategory.METADATA, fetched)
            except CacheWriteError as exc:
                logger.warning("Metadata cache not persisted: %s", exc.message)

        logger.debug(
            "Metadata: %d requested, %d looked up, %d labelled",
            len(mints),
            len(missing),
            len(result),
        )
        return result
