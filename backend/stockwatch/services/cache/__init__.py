"""
Persistent provider response cache.
"""
from stockwatch.services.cache.cache_store import CacheStore, normalize_key

__all__ = [
    "CacheStore",
    "normalize_key",
]
