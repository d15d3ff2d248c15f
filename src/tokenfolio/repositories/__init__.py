"""Persistence layer for the price and metadata caches."""

from tokenfolio.repositories.protocols import CacheRepository
from tokenfolio.repositories.base import ExpiringCacheRepository
from tokenfolio.repositories.json_file import JsonFileCacheRepository

__all__ = [
    "CacheRepository",
    "ExpiringCacheRepository",
    "JsonFileCacheRepository",
]
