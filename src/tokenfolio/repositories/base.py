"""Expiry handling shared by the cache backends."""

import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

from tokenfolio.core.timezone import now_utc
from tokenfolio.domain.models import CacheCategory, CacheEntry

logger = logging.getLogger(__name__)

DEFAULT_PRICE_TTL_SECONDS = 300
DEFAULT_METADATA_TTL_SECONDS = 86_400


class ExpiringCacheRepository:
    """
    Base for cache backends.

    Subclasses only read and write raw CacheEntry objects; expiry, key
    access and whole-category rewrites live here.
    """

    def __init__(
        self,
        price_ttl_seconds: int = DEFAULT_PRICE_TTL_SECONDS,
        metadata_ttl_seconds: int = DEFAULT_METADATA_TTL_SECONDS,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._ttls = {
            CacheCategory.PRICES: timedelta(seconds=price_ttl_seconds),
            CacheCategory.METADATA: timedelta(seconds=metadata_ttl_seconds),
        }
        self._clock = clock

    def ttl_for(self, category: CacheCategory) -> timedelta:
        """Expiry window for a category."""
        return self._ttls[category]

    def load(self, category: CacheCategory) -> Optional[dict[str, Any]]:
        """Return the whole fresh map for a category, or None."""
        entry = self._read_entry(category)
        if entry is None:
            return None
        if not entry.is_fresh(self._clock(), self.ttl_for(category)):
            logger.debug("%s cache expired (written %s)", category.value, entry.timestamp.isoformat())
            return None
        return dict(entry.data)

    def save(self, category: CacheCategory, data: dict[str, Any]) -> None:
        """Overwrite the whole category map and stamp it with the current time."""
        self._write_entry(category, CacheEntry(timestamp=self._clock(), data=dict(data)))

    def merge(self, category: CacheCategory, updates: dict[str, Any]) -> None:
        """
        Add entries to a category without extending the life of the ones already there.

        A fresh category keeps its original timestamp, so no entry outlives
        its ttl. A missing or expired category starts over with only the
        new entries.
        """
        now = self._clock()
        entry = self._read_entry(category)
        if entry is not None and entry.is_fresh(now, self.ttl_for(category)):
            data = dict(entry.data)
            data.update(updates)
            self._write_entry(category, CacheEntry(timestamp=entry.timestamp, data=data))
        else:
            self._write_entry(category, CacheEntry(timestamp=now, data=dict(updates)))

    def get(self, category: CacheCategory, key: str) -> Optional[Any]:
        """Return one fresh value, or None if missing or expired."""
        data = self.load(category)
        if data is None:
            return None
        return data.get(key)

    def put(self, category: CacheCategory, key: str, data: Any) -> None:
        """Set one value, keeping the category's current expiry."""
        self.merge(category, {key: data})

    def _read_entry(self, category: CacheCategory) -> Optional[CacheEntry]:
        raise NotImplementedError

    def _write_entry(self, category: CacheCategory, entry: CacheEntry) -> None:
        raise NotImplementedError
