"""Namespaced TTL cache with memory and persistent tiers.

Entries are stored under composite keys ``{prefix}:{key}`` with their
creation time and TTL. Expired entries are evicted lazily on read and in
bulk by :meth:`Cache.cleanup`.

The Cache never raises for expected conditions: misses, expiry, storage
failures and serialisation problems all degrade to "absent" (or ``False``
from ``set``) and are logged as warnings.

Key Format:
    {prefix}:{logical_key}, e.g. ``resume-app-cache:resume:3fa9...``
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterator, List, Optional, Tuple

import structlog

from futureresume.cache.backends import InMemoryKeyValueStore
from futureresume.protocols.storage import KeyValueStoreProtocol

log = structlog.get_logger()

DEFAULT_TTL = 5 * 60.0
DEFAULT_PREFIX = "resume-app-cache"


class StorageTier(str, Enum):
    """Where an entry lives."""

    MEMORY = "memory"  # cleared when the process exits
    PERSISTENT = "persistent"  # survives restarts, JSON serialised


@dataclass
class CacheEntry:
    """A cached value with its creation timestamp and TTL (seconds)."""

    value: Any
    created_at: float
    ttl: float

    def is_expired(self, now: float) -> bool:
        # A TTL of 0 is never served
        return self.ttl <= 0 or now - self.created_at > self.ttl

    def to_json(self) -> str:
        """Serialise for the persistent tier.

        Raises:
            TypeError, ValueError: If value is not JSON serialisable.
        """
        return json.dumps(
            {"value": self.value, "created_at": self.created_at, "ttl": self.ttl},
            allow_nan=False,
        )

    @classmethod
    def from_json(cls, raw: str) -> "CacheEntry":
        """Parse a persistent-tier record.

        Raises:
            ValueError: If the record is not a cache entry.
        """
        data = json.loads(raw)
        if not isinstance(data, dict) or not {"value", "created_at", "ttl"} <= data.keys():
            raise ValueError("not a cache entry")
        created_at, ttl = data["created_at"], data["ttl"]
        if not isinstance(created_at, (int, float)) or not isinstance(ttl, (int, float)):
            raise ValueError("cache entry timestamps must be numeric")
        return cls(value=data["value"], created_at=float(created_at), ttl=float(ttl))


@dataclass(frozen=True)
class CacheStats:
    """Snapshot of one tier/prefix."""

    item_count: int
    total_size: int
    expired_items: int


class Cache:
    """Two-tier TTL cache.

    Attributes:
        default_ttl: TTL applied when ``set`` gets none (seconds).
        default_prefix: Namespace applied when a call gets no prefix.

    Args:
        store: Persistent-tier store. Defaults to an in-memory store.
        default_ttl: Default TTL in seconds.
        default_prefix: Default namespace; must not contain ':'.
        clock: Wall-clock source in seconds. Wall clock rather than monotonic
            because persistent entries outlive the process.
    """

    def __init__(
        self,
        store: Optional[KeyValueStoreProtocol] = None,
        default_ttl: float = DEFAULT_TTL,
        default_prefix: str = DEFAULT_PREFIX,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if default_ttl < 0:
            raise ValueError("default_ttl must be >= 0")
        if not default_prefix or ":" in default_prefix:
            raise ValueError("default_prefix must be non-empty and must not contain ':'")
        self._memory: dict[str, CacheEntry] = {}
        self._store: KeyValueStoreProtocol = store if store is not None else InMemoryKeyValueStore()
        self.default_ttl = default_ttl
        self.default_prefix = default_prefix
        self._clock = clock

    def _namespace(self, prefix: Optional[str]) -> str:
        """Resolve a per-call prefix; None means the default prefix."""
        if prefix is None:
            return self.default_prefix
        if not prefix or ":" in prefix:
            raise ValueError(f"Invalid cache prefix {prefix!r}: must be non-empty without ':'")
        return prefix

    def _make_key(self, key: str, prefix: Optional[str]) -> str:
        return f"{self._namespace(prefix)}:{key}"

    # -- core operations -------------------------------------------------

    def set(
        self,
        key: str,
        value: Any,
        ttl: Optional[float] = None,
        tier: StorageTier = StorageTier.MEMORY,
        prefix: Optional[str] = None,
    ) -> bool:
        """Store value, overwriting any entry under the same composite key.

        A persistent-store write failure (e.g. quota exceeded) stores the
        entry in the memory tier instead.

        Returns:
            True if stored, False if the value cannot be JSON serialised for
            the persistent tier.

        Raises:
            ValueError: prefix is empty or contains ':'.
        """
        cache_key = self._make_key(key, prefix)
        entry = CacheEntry(
            value=value,
            created_at=self._clock(),
            ttl=self.default_ttl if ttl is None else ttl,
        )

        if tier is StorageTier.MEMORY:
            self._memory[cache_key] = entry
            log.debug("cache_set", key=cache_key, tier=tier.value, ttl=entry.ttl)
            return True

        try:
            serialized = entry.to_json()
        except (TypeError, ValueError) as e:
            log.warning("cache_serialize_error", key=cache_key, error=str(e))
            return False

        try:
            self._store.set_item(cache_key, serialized)
        except Exception as e:
            # Spill to memory; readable through the memory tier until expiry
            log.warning("cache_set_error", key=cache_key, tier=tier.value, error=str(e))
            self._memory[cache_key] = entry
            return True

        log.debug("cache_set", key=cache_key, tier=tier.value, ttl=entry.ttl)
        return True

    def get(
        self,
        key: str,
        tier: StorageTier = StorageTier.MEMORY,
        prefix: Optional[str] = None,
    ) -> Optional[Any]:
        """Return the unexpired value or None; expired entries are evicted.

        An invalid prefix is reported as a miss.
        """
        try:
            cache_key = self._make_key(key, prefix)
        except ValueError as e:
            log.warning("cache_invalid_prefix", key=key, prefix=prefix, error=str(e))
            return None
        now = self._clock()

        if tier is StorageTier.MEMORY:
            entry = self._memory.get(cache_key)
            if entry is None:
                log.debug("cache_miss", key=cache_key, tier=tier.value)
                return None
            if entry.is_expired(now):
                del self._memory[cache_key]
                log.debug("cache_expired", key=cache_key, tier=tier.value)
                return None
            return entry.value

        try:
            raw = self._store.get_item(cache_key)
        except Exception as e:
            log.warning("cache_get_error", key=cache_key, tier=tier.value, error=str(e))
            return None

        if raw is None:
            log.debug("cache_miss", key=cache_key, tier=tier.value)
            return None

        try:
            entry = CacheEntry.from_json(raw)
        except ValueError as e:
            log.warning("cache_corrupt", key=cache_key, error=str(e))
            self._remove_persistent(cache_key)
            return None

        if entry.is_expired(now):
            self._remove_persistent(cache_key)
            log.debug("cache_expired", key=cache_key, tier=tier.value)
            return None

        return entry.value

    def delete(
        self,
        key: str,
        tier: StorageTier = StorageTier.MEMORY,
        prefix: Optional[str] = None,
    ) -> None:
        """Remove one entry; no-op if absent."""
        cache_key = self._make_key(key, prefix)
        if tier is StorageTier.MEMORY:
            self._memory.pop(cache_key, None)
        else:
            self._remove_persistent(cache_key)

    def clear(
        self,
        tier: StorageTier = StorageTier.MEMORY,
        prefix: Optional[str] = None,
    ) -> int:
        """Remove every entry under prefix (default prefix if None).

        Entries under any other prefix are untouched.

        Returns:
            Number of entries removed.
        """
        scope = f"{self._namespace(prefix)}:"

        if tier is StorageTier.MEMORY:
            doomed = [k for k in self._memory if k.startswith(scope)]
            for k in doomed:
                del self._memory[k]
        else:
            doomed = [k for k in self._persistent_keys() if k.startswith(scope)]
            for k in doomed:
                self._remove_persistent(k)

        log.info("cache_clear", tier=tier.value, prefix=scope[:-1], count=len(doomed))
        return len(doomed)

    def cleanup(
        self,
        tier: StorageTier = StorageTier.MEMORY,
        prefix: Optional[str] = None,
    ) -> int:
        """Sweep expired entries from a tier.

        Args:
            tier: Tier to sweep.
            prefix: Restrict the sweep to one namespace. None sweeps every
                cache entry in the tier. Under an explicit prefix, persistent
                records that cannot be decoded are removed too; without one
                they are left alone since they may not belong to the cache.

        Returns:
            Number of entries removed.
        """
        now = self._clock()
        scope = f"{self._namespace(prefix)}:" if prefix is not None else None
        removed = 0

        if tier is StorageTier.MEMORY:
            doomed = [
                k
                for k, entry in self._memory.items()
                if (scope is None or k.startswith(scope)) and entry.is_expired(now)
            ]
            for k in doomed:
                del self._memory[k]
            return len(doomed)

        for k, entry in self._iter_persistent(scope):
            if entry is None:
                if scope is not None:
                    self._remove_persistent(k)
                    removed += 1
            elif entry.is_expired(now):
                self._remove_persistent(k)
                removed += 1
        return removed

    def get_stats(
        self,
        tier: StorageTier = StorageTier.MEMORY,
        prefix: Optional[str] = None,
    ) -> CacheStats:
        """Count items, serialised size and expired entries under a prefix."""
        now = self._clock()
        scope = f"{self._namespace(prefix)}:"
        item_count = total_size = expired = 0

        if tier is StorageTier.MEMORY:
            for k, entry in self._memory.items():
                if not k.startswith(scope):
                    continue
                item_count += 1
                try:
                    total_size += len(entry.to_json())
                except (TypeError, ValueError):
                    total_size += len(repr(entry.value))
                if entry.is_expired(now):
                    expired += 1
            return CacheStats(item_count, total_size, expired)

        for k, entry in self._iter_persistent(scope):
            item_count += 1
            raw = self._safe_get_item(k)
            total_size += len(raw) if raw else 0
            # Undecodable records count as expired
            if entry is None or entry.is_expired(now):
                expired += 1
        return CacheStats(item_count, total_size, expired)

    # -- persistent tier helpers -----------------------------------------

    def _persistent_keys(self) -> List[str]:
        try:
            keys = [self._store.key(i) for i in range(self._store.length)]
        except Exception as e:
            log.warning("cache_enumerate_error", error=str(e))
            return []
        return [k for k in keys if k is not None]

    def _iter_persistent(
        self, scope: Optional[str]
    ) -> Iterator[Tuple[str, Optional[CacheEntry]]]:
        """Yield (key, entry) pairs; entry is None for undecodable records."""
        for k in self._persistent_keys():
            if scope is not None and not k.startswith(scope):
                continue
            raw = self._safe_get_item(k)
            if raw is None:
                continue
            try:
                yield k, CacheEntry.from_json(raw)
            except ValueError:
                yield k, None

    def _safe_get_item(self, key: str) -> Optional[str]:
        try:
            return self._store.get_item(key)
        except Exception as e:
            log.warning("cache_get_error", key=key, tier=StorageTier.PERSISTENT.value, error=str(e))
            return None

    def _remove_persistent(self, key: str) -> None:
        try:
            self._store.remove_item(key)
        except Exception as e:
            log.warning("cache_delete_error", key=key, error=str(e))
