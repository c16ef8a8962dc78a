"""Retry with exponential backoff.

Runs an async operation up to ``max_attempts`` times, sleeping
``min(base_delay * backoff_multiplier ** (attempt - 1), max_delay)`` seconds
between failed attempts (never after the last one). Whether a failure is
retried is decided by a predicate; the default classifies typed exceptions
first and falls back to message markers for untyped ones.

Usage:
    from futureresume.resilience.retry import with_api_retry

    result = await with_api_retry(lambda: client.generate(request), "resume generation")
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Iterable, Optional, TypeVar

import structlog

from futureresume.core.exceptions import (
    AuthenticationError,
    CircuitOpenError,
    ContractViolationError,
    GenerationTimeoutError,
    ServiceNotConfiguredError,
    TransientError,
    ValidationError,
)

log = structlog.get_logger()

T = TypeVar("T")

RETRYABLE_MARKERS = ("fetch", "timeout", "network", "502", "503", "504")
API_RETRYABLE_MARKERS = RETRYABLE_MARKERS + ("connection",)
AUTH_RETRYABLE_MARKERS = ("network", "timeout", "connection", "fetch")
AUTH_EXCLUDED_MARKERS = ("unauthorized", "invalid")

# Never retried regardless of message
_PERMANENT_ERRORS = (
    ValidationError,
    AuthenticationError,
    ContractViolationError,
    ServiceNotConfiguredError,
    CircuitOpenError,
)
_TRANSIENT_ERRORS = (TransientError, asyncio.TimeoutError, TimeoutError, ConnectionError)


def _classify(
    error: BaseException,
    markers: Iterable[str],
    excluded_markers: Iterable[str] = (),
) -> bool:
    message = str(error).lower()
    if any(m in message for m in excluded_markers):
        return False
    if isinstance(error, _PERMANENT_ERRORS):
        return False
    if isinstance(error, _TRANSIENT_ERRORS):
        return True
    return any(m in message for m in markers)


def is_retryable_error(error: BaseException) -> bool:
    """Default retry predicate.

    TransientError (including timeouts) and connection errors are retryable;
    validation, auth, contract, not-configured and open-circuit errors never
    are. Anything else is retried only if its message mentions fetch,
    timeout, network, 502, 503 or 504 (case-insensitive).
    """
    return _classify(error, RETRYABLE_MARKERS)


async def _sleep(seconds: float) -> None:
    await asyncio.sleep(seconds)


@dataclass
class RetryOptions:
    """Configuration for with_retry.

    Attributes:
        max_attempts: Total attempts including the first (>= 1).
        base_delay: Delay before the second attempt, in seconds.
        backoff_multiplier: Growth factor per attempt (>= 1).
        max_delay: Upper bound on any single delay, in seconds.
        retry_predicate: Decides whether a failure is retried.
        on_retry: Called with (attempt, error) before each wait. Optional.
        attempt_timeout: Per-attempt timeout in seconds. None disables it.
        sleep: Awaitable sleep used between attempts; injectable for tests.
    """

    max_attempts: int = 3
    base_delay: float = 1.0
    backoff_multiplier: float = 2.0
    max_delay: float = 10.0
    retry_predicate: Callable[[BaseException], bool] = is_retryable_error
    on_retry: Optional[Callable[[int, BaseException], None]] = None
    attempt_timeout: Optional[float] = None
    sleep: Callable[[float], Awaitable[None]] = field(default=_sleep, repr=False)

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.base_delay < 0:
            raise ValueError("base_delay must be >= 0")
        if self.backoff_multiplier < 1:
            raise ValueError("backoff_multiplier must be >= 1")
        if self.max_delay < 0:
            raise ValueError("max_delay must be >= 0")
        if self.attempt_timeout is not None and self.attempt_timeout <= 0:
            raise ValueError("attempt_timeout must be > 0")

    def delay(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number ``attempt`` (1-based)."""
        return min(self.base_delay * self.backoff_multiplier ** (attempt - 1), self.max_delay)


async def _run_attempt(operation: Callable[[], Awaitable[T]], timeout: Optional[float]) -> T:
    if timeout is None:
        return await operation()
    try:
        return await asyncio.wait_for(operation(), timeout=timeout)
    except asyncio.TimeoutError:
        raise GenerationTimeoutError(timeout_seconds=timeout) from None


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    options: Optional[RetryOptions] = None,
) -> T:
    """Run operation, retrying retryable failures with backoff.

    Args:
        operation: Zero-argument callable returning a fresh awaitable per call.
        options: Retry configuration. Defaults to RetryOptions().

    Returns:
        The first successful result.

    Raises:
        The last error, once attempts are exhausted or the predicate rejects it.
    """
    opts = options or RetryOptions()

    for attempt in range(1, opts.max_attempts + 1):
        try:
            result = await _run_attempt(operation, opts.attempt_timeout)
        except Exception as e:
            log.warning(
                "retry_attempt_failed",
                attempt=attempt,
                max_attempts=opts.max_attempts,
                error_class=type(e).__name__,
                error=str(e),
            )

            if attempt == opts.max_attempts or not opts.retry_predicate(e):
                raise

            if opts.on_retry is not None:
                opts.on_retry(attempt, e)

            delay = opts.delay(attempt)
            log.debug("retry_scheduled", attempt=attempt, delay=delay)
            await opts.sleep(delay)
            continue

        if attempt > 1:
            log.info("retry_succeeded", attempt=attempt)
        return result

    # max_attempts >= 1 guarantees the loop returns or raises
    raise AssertionError("unreachable")


# === Presets ===


def _api_predicate(error: BaseException) -> bool:
    return _classify(error, API_RETRYABLE_MARKERS)


def _auth_predicate(error: BaseException) -> bool:
    return _classify(error, AUTH_RETRYABLE_MARKERS, AUTH_EXCLUDED_MARKERS)


def api_retry_options(
    context: str = "API call",
    max_attempts: int = 3,
    base_delay: float = 2.0,
    backoff_multiplier: float = 1.5,
    max_delay: float = 10.0,
    attempt_timeout: Optional[float] = None,
) -> RetryOptions:
    """Preset for calls to remote APIs.

    Also retries messages mentioning "connection" and logs each retry under
    the given context.
    """

    def on_retry(attempt: int, error: BaseException) -> None:
        log.warning("api_retry_attempt", context=context, attempt=attempt, error=str(error))

    return RetryOptions(
        max_attempts=max_attempts,
        base_delay=base_delay,
        backoff_multiplier=backoff_multiplier,
        max_delay=max_delay,
        retry_predicate=_api_predicate,
        on_retry=on_retry,
        attempt_timeout=attempt_timeout,
    )


def auth_retry_options() -> RetryOptions:
    """Preset for authentication calls.

    Two attempts one second apart, network problems only. Anything that
    looks like a credential failure is never retried.
    """

    def on_retry(attempt: int, error: BaseException) -> None:
        log.warning("auth_retry_attempt", attempt=attempt, error=str(error))

    return RetryOptions(
        max_attempts=2,
        base_delay=1.0,
        backoff_multiplier=1.0,
        retry_predicate=_auth_predicate,
        on_retry=on_retry,
    )


async def with_api_retry(operation: Callable[[], Awaitable[T]], context: str = "API call") -> T:
    return await with_retry(operation, api_retry_options(context))


async def with_auth_retry(operation: Callable[[], Awaitable[T]]) -> T:
    return await with_retry(operation, auth_retry_options())
