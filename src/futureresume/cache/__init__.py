"""Namespaced TTL cache.

Exports:
    Cache: Two-tier (memory / persistent) TTL cache.
    CacheEntry, CacheStats, StorageTier: Cache data types.
    CacheJanitor: Periodic expired-entry sweep.
    ResumeCache: Resume-specific accessors.
    InMemoryKeyValueStore, JsonFileKeyValueStore: Persistent-tier stores.
"""

from futureresume.cache.backends import InMemoryKeyValueStore, JsonFileKeyValueStore
from futureresume.cache.janitor import CacheJanitor
from futureresume.cache.namespaces import ResumeCache
from futureresume.cache.store import (
    DEFAULT_PREFIX,
    DEFAULT_TTL,
    Cache,
    CacheEntry,
    CacheStats,
    StorageTier,
)

__all__ = [
    "Cache",
    "CacheEntry",
    "CacheJanitor",
    "CacheStats",
    "DEFAULT_PREFIX",
    "DEFAULT_TTL",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "ResumeCache",
    "StorageTier",
]
