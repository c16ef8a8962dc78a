"""Periodic expired-entry sweep for a Cache.

Usage:
    async with CacheJanitor(cache, interval=600):
        ...  # both tiers swept every 10 minutes
"""

from __future__ import annotations

import asyncio
from typing import Dict, Optional, Sequence

import structlog

from futureresume.cache.store import Cache, StorageTier

log = structlog.get_logger()


class CacheJanitor:
    """Background task sweeping expired entries at a fixed interval.

    Started explicitly by whoever owns the Cache, never at import time.

    Args:
        cache: Cache to sweep.
        interval: Seconds between sweeps.
        tiers: Tiers swept on each run.
    """

    def __init__(
        self,
        cache: Cache,
        interval: float = 600.0,
        tiers: Sequence[StorageTier] = (StorageTier.MEMORY, StorageTier.PERSISTENT),
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._cache = cache
        self._interval = interval
        self._tiers = tuple(tiers)
        self._running = False
        self._worker_task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._running

    def sweep(self) -> Dict[StorageTier, int]:
        """Run one cleanup pass over every configured tier."""
        removed = {tier: self._cache.cleanup(tier=tier) for tier in self._tiers}
        total = sum(removed.values())
        if total:
            log.info(
                "cache_cleanup",
                removed=total,
                **{f"{tier.value}_removed": count for tier, count in removed.items()},
            )
        return removed

    async def start(self) -> None:
        """Start the periodic sweep."""
        if self._running:
            log.warning("cache_janitor_already_running")
            return

        self._running = True
        self._worker_task = asyncio.create_task(self._run())
        log.info("cache_janitor_started", interval=self._interval)

    async def stop(self) -> None:
        """Stop the periodic sweep."""
        self._running = False

        if self._worker_task is not None:
            self._worker_task.cancel()
            try:
                await self._worker_task
            except asyncio.CancelledError:
                pass
            self._worker_task = None

        log.info("cache_janitor_stopped")

    async def _run(self) -> None:
        while self._running:
            await asyncio.sleep(self._interval)
            self.sweep()

    async def __aenter__(self) -> "CacheJanitor":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()
