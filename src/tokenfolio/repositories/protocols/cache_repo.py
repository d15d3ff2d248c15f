"""Cache repository protocol for timestamped category maps."""

from typing import Any, Optional, Protocol

from tokenfolio.domain.models import CacheCategory


class CacheRepository(Protocol):
    """
    Interface for the price and metadata caches.

    Reads return None both when nothing is stored and when the stored
    category is past its expiry; callers re-fetch in either case.
    """

    def load(self, category: CacheCategory) -> Optional[dict[str, Any]]:
        """Return the whole fresh map for a category, or None."""
        ...

    def save(self, category: CacheCategory, data: dict[str, Any]) -> None:
        """Overwrite the whole category map and stamp it with the current time."""
        ...

    def merge(self, category: CacheCategory, updates: dict[str, Any]) -> None:
        """Add entries to a category; a fresh category keeps its timestamp."""
        ...

    def get(self, category: CacheCategory, key: str) -> Optional[Any]:
        """Return one fresh value, or None if missing or expired."""
        ...

    def put(self, category: CacheCategory, key: str, data: Any) -> None:
        """Set one value, keeping the category's current expiry."""
        ...
