"""JSON file implementation of CacheRepository."""

import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from tokenfolio.core.exceptions import CacheWriteError
from tokenfolio.core.timezone import now_utc, parse_datetime_utc
from tokenfolio.domain.models import CacheCategory, CacheEntry
from tokenfolio.repositories.base import (
    DEFAULT_METADATA_TTL_SECONDS,
    DEFAULT_PRICE_TTL_SECONDS,
    ExpiringCacheRepository,
)

logger = logging.getLogger(__name__)

CACHE_FILENAMES: dict[CacheCategory, str] = {
    CacheCategory.PRICES: "price_cache.json",
    CacheCategory.METADATA: "metadata_cache.json",
}


class JsonFileCacheRepository(ExpiringCacheRepository):
    """
    One JSON file per category under a cache directory.

    File shape: {"timestamp": "<ISO-8601 UTC>", "data": {"<mint>": ...}}
    Unreadable or malformed files are treated as a miss.
    """

    def __init__(
        self,
        cache_dir: Path,
        price_ttl_seconds: int = DEFAULT_PRICE_TTL_SECONDS,
        metadata_ttl_seconds: int = DEFAULT_METADATA_TTL_SECONDS,
        clock: Callable[[], datetime] = now_utc,
    ):
        super().__init__(
            price_ttl_seconds=price_ttl_seconds,
            metadata_ttl_seconds=metadata_ttl_seconds,
            clock=clock,
        )
        self._cache_dir = Path(cache_dir)

    def path_for(self, category: CacheCategory) -> Path:
        """File backing a category."""
        return self._cache_dir / CACHE_FILENAMES[category]

    def _read_entry(self, category: CacheCategory) -> Optional[CacheEntry]:
        path = self.path_for(category)
        if not path.exists():
            return None
        try:
            with path.open("r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable %s cache at %s: %s", category.value, path, exc)
            return None

        if not isinstance(raw, dict) or not isinstance(raw.get("data"), dict):
            logger.warning("Ignoring malformed %s cache at %s", category.value, path)
            return None
        try:
            timestamp = parse_datetime_utc(str(raw.get("timestamp")))
        except (ValueError, OverflowError):
            logger.warning("Ignoring %s cache with bad timestamp at %s", category.value, path)
            return None
        return CacheEntry(timestamp=timestamp, data=raw["data"])

    def _write_entry(self, category: CacheCategory, entry: CacheEntry) -> None:
        path = self.path_for(category)
        payload = {"timestamp": entry.timestamp.isoformat(), "data": entry.data}
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            # Write to a sibling temp file then swap it in, so readers never
            # see a half-written file; concurrent writers: last replace wins.
            fd, tmp_name = tempfile.mkstemp(
                dir=str(path.parent), prefix=path.name, suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(payload, f, ensure_ascii=False)
                os.replace(tmp_name, path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except (OSError, TypeError, ValueError) as exc:
            raise CacheWriteError(category.value, str(exc)) from exc
