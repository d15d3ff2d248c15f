"""JSON file repository implementations."""

from tokenfolio.repositories.json_file.cache_repo import JsonFileCacheRepository, CACHE_FILENAMES

__all__ = [
    "JsonFileCacheRepository",
    "CACHE_FILENAMES",
]
