"""Composition root.

Builds exactly one Cache (with its janitor), one breaker registry, one
background task queue and one orchestrator from Settings, and hands them to
consumers. Nothing here is a module-level singleton.

Usage:
    settings = get_settings()
    async with build_pipeline(settings) as pipeline:
        result = await pipeline.orchestrator.generate(request)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import structlog

from futureresume.cache import (
    Cache,
    CacheJanitor,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    ResumeCache,
)
from futureresume.core.config import Settings
from futureresume.core.error_reporting import ErrorReporter
from futureresume.generation.client import HostedGenerationClient
from futureresume.generation.fallback import FallbackPipeline
from futureresume.generation.orchestrator import GenerationOrchestrator
from futureresume.protocols.generator import RemoteGeneratorProtocol
from futureresume.protocols.storage import KeyValueStoreProtocol
from futureresume.resilience.circuit_breaker import CircuitBreakerRegistry
from futureresume.resilience.retry import api_retry_options
from futureresume.tasks.queue import BackgroundTaskQueue

log = structlog.get_logger()

GENERATION_BREAKER = "resume-generation"


@dataclass
class GenerationPipeline:
    """Shared runtime components for one process."""

    settings: Settings
    cache: Cache
    resume_cache: ResumeCache
    janitor: CacheJanitor
    breakers: CircuitBreakerRegistry
    task_queue: BackgroundTaskQueue
    orchestrator: GenerationOrchestrator
    error_reporter: ErrorReporter

    async def start(self) -> None:
        await self.janitor.start()
        log.info("pipeline_started")

    async def stop(self) -> None:
        cancelled = self.task_queue.cancel_all()
        await self.janitor.stop()
        log.info("pipeline_stopped", cancelled_tasks=cancelled)

    async def __aenter__(self) -> "GenerationPipeline":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()


def build_pipeline(
    settings: Settings,
    remote: Optional[RemoteGeneratorProtocol] = None,
    store: Optional[KeyValueStoreProtocol] = None,
) -> GenerationPipeline:
    """Wire every component from settings.

    Args:
        settings: Loaded configuration.
        remote: Remote generator; defaults to HostedGenerationClient.
        store: Persistent-tier store; defaults to a JSON file when
            ``cache.persistent_path`` is set, else an in-memory store.
    """
    if store is None:
        if settings.cache.persistent_path:
            store = JsonFileKeyValueStore(settings.cache.persistent_path)
        else:
            store = InMemoryKeyValueStore()

    cache = Cache(
        store=store,
        default_ttl=settings.cache.default_ttl,
        default_prefix=settings.cache.prefix,
    )
    janitor = CacheJanitor(cache, interval=settings.cache.cleanup_interval)

    if remote is None:
        gen = settings.generation
        remote = HostedGenerationClient(
            url=gen.function_url,
            api_key=gen.api_key.get_secret_value() if gen.api_key else None,
            timeout=gen.request_timeout,
        )

    breakers = CircuitBreakerRegistry()
    breaker = breakers.get(
        GENERATION_BREAKER,
        failure_threshold=settings.circuit_breaker.failure_threshold,
        cooldown=settings.circuit_breaker.cooldown,
    )

    retry = settings.retry
    orchestrator = GenerationOrchestrator(
        remote=remote,
        breaker=breaker,
        cache=cache,
        retry_options=api_retry_options(
            "resume generation",
            max_attempts=retry.max_attempts,
            base_delay=retry.base_delay,
            backoff_multiplier=retry.backoff_multiplier,
            max_delay=retry.max_delay,
            attempt_timeout=settings.generation.attempt_timeout,
        ),
        fallback=FallbackPipeline(),
        cache_ttl=settings.generation.cache_ttl,
    )

    log.debug(
        "pipeline_built",
        persistent_store=type(store).__name__,
        remote=type(remote).__name__,
        max_concurrent_tasks=settings.tasks.max_concurrent_tasks,
    )

    return GenerationPipeline(
        settings=settings,
        cache=cache,
        resume_cache=ResumeCache(cache),
        janitor=janitor,
        breakers=breakers,
        task_queue=BackgroundTaskQueue(max_concurrent_tasks=settings.tasks.max_concurrent_tasks),
        orchestrator=orchestrator,
        error_reporter=ErrorReporter(),
    )
