"""Cache entry model."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any


@dataclass
class CacheEntry:
    """
    One cache category: a flat map of mint -> value plus a single timestamp.

    The whole map is rewritten on every save, so the timestamp covers
    every key in it.
    """

    timestamp: datetime
    data: dict[str, Any] = field(default_factory=dict)

    def is_fresh(self, now: datetime, ttl: timedelta) -> bool:
        """An entry is valid only while now - timestamp < ttl."""
        return now - self.timestamp < ttl
