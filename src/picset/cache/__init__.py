"""Cache subsystem — single-flight key-value stores with content-addressed keys."""

from picset.cache.base import DedupCache, KeyValueStore
from picset.cache.keys import generate_cache_key, hash_image
from picset.cache.memory import MemoryStore
from picset.cache.persistent import JsonFileStore
from picset.cache.stats import CacheStats

__all__ = [
    "DedupCache",
    "KeyValueStore",
    "MemoryStore",
    "JsonFileStore",
    "CacheStats",
    "generate_cache_key",
    "hash_image",
]
