"""Repository protocol definitions (interfaces)."""

from tokenfolio.repositories.protocols.cache_repo import CacheRepository

__all__ = [
    "CacheRepository",
]
