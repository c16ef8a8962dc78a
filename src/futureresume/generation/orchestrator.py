"""Resilient resume generation.

Wraps the remote generator in a circuit breaker and retry executor, caches
successful results, and degrades to the local FallbackPipeline when the
remote service is unavailable.

Per-request state machine:
    idle -> calling_remote -> succeeded    -> idle
                           -> falling_back -> idle
    (errors that are not unavailability propagate; state returns to idle)

Error Handling:
    - CircuitOpenError, ServiceNotConfiguredError, or an untyped error whose
      message mentions "not configured" / "api key" -> fallback, never raised
    - Exhausted transient errors, contract violations, validation and
      authentication errors                -> propagated to the caller
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Optional

import structlog

from futureresume.cache.store import Cache
from futureresume.core.exceptions import (
    AuthenticationError,
    CircuitOpenError,
    ContractViolationError,
    ServiceNotConfiguredError,
    TransientError,
    ValidationError,
)
from futureresume.generation.fallback import FallbackPipeline
from futureresume.generation.models import GenerationRequest, GenerationResult
from futureresume.protocols.generator import RemoteGeneratorProtocol
from futureresume.resilience.circuit_breaker import CircuitBreaker, CircuitState
from futureresume.resilience.retry import RetryOptions, api_retry_options, with_retry

log = structlog.get_logger()

RESULT_CACHE_PREFIX = "generation-result"
UNAVAILABLE_MARKERS = ("not configured", "api key")
_SURFACED_ERRORS = (AuthenticationError, ValidationError, ContractViolationError, TransientError)


class GenerationState(str, Enum):
    IDLE = "idle"
    CALLING_REMOTE = "calling_remote"
    SUCCEEDED = "succeeded"
    FALLING_BACK = "falling_back"


StateHook = Callable[[str, GenerationState], None]


def is_service_unavailable(error: BaseException) -> bool:
    """True when error means "remote path unusable right now" rather than "broken".

    The exception type decides first; message markers only classify errors
    whose type says nothing, so a rejected API key stays an auth failure.
    """
    if isinstance(error, (CircuitOpenError, ServiceNotConfiguredError)):
        return True
    if isinstance(error, _SURFACED_ERRORS):
        return False
    message = str(error).lower()
    return any(marker in message for marker in UNAVAILABLE_MARKERS)


class GenerationOrchestrator:
    """Coordinates cache, breaker, retry and fallback for each request.

    Args:
        remote: Remote generator.
        breaker: Breaker guarding the remote generator.
        cache: Result cache. None disables caching.
        retry_options: Retry configuration. Defaults to the API preset.
        fallback: Local pipeline used when the remote is unavailable.
        cache_ttl: Seconds a successful remote result stays cached.
        on_state_change: Optional hook called with (request_key, state).
    """

    def __init__(
        self,
        remote: RemoteGeneratorProtocol,
        breaker: CircuitBreaker,
        cache: Optional[Cache] = None,
        retry_options: Optional[RetryOptions] = None,
        fallback: Optional[FallbackPipeline] = None,
        cache_ttl: float = 30 * 60.0,
        on_state_change: Optional[StateHook] = None,
    ) -> None:
        self._remote = remote
        self._breaker = breaker
        self._cache = cache
        self._retry_options = retry_options or api_retry_options("resume generation")
        self._fallback = fallback or FallbackPipeline()
        self._cache_ttl = cache_ttl
        self._on_state_change = on_state_change

    @property
    def breaker(self) -> CircuitBreaker:
        return self._breaker

    @property
    def degraded(self) -> bool:
        """True while the breaker is open or probing."""
        return self._breaker.get_state().state is not CircuitState.CLOSED

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """Generate a result for request.

        Raises:
            ValidationError: The request is invalid; nothing was attempted.
            GenerationError: A non-unavailability failure of the remote path.
        """
        errors = request.validate()
        if errors:
            raise ValidationError(errors)

        request_key = request.cache_key()

        cached = self._get_cached(request_key)
        if cached is not None:
            log.info("generation_cache_hit", request_key=request_key[:12])
            return cached

        async def remote_call() -> GenerationResult:
            result = await self._remote.generate(request)
            result.check_contract()
            return result

        self._set_state(request_key, GenerationState.CALLING_REMOTE)
        try:
            result = await self._breaker.execute(
                lambda: with_retry(remote_call, self._retry_options)
            )
        except Exception as e:
            if not is_service_unavailable(e):
                log.error(
                    "generation_failed",
                    request_key=request_key[:12],
                    error_class=type(e).__name__,
                    error=str(e),
                )
                self._set_state(request_key, GenerationState.IDLE)
                raise

            log.warning(
                "generation_fallback",
                request_key=request_key[:12],
                reason=type(e).__name__,
                error=str(e),
            )
            self._set_state(request_key, GenerationState.FALLING_BACK)
            try:
                return self._fallback.run(request)
            finally:
                self._set_state(request_key, GenerationState.IDLE)

        self._set_state(request_key, GenerationState.SUCCEEDED)
        self._store_cached(request_key, result)
        self._set_state(request_key, GenerationState.IDLE)
        log.info("generation_succeeded", request_key=request_key[:12])
        return result

    def _get_cached(self, request_key: str) -> Optional[GenerationResult]:
        if self._cache is None:
            return None
        data = self._cache.get(request_key, prefix=RESULT_CACHE_PREFIX)
        if data is None:
            return None
        return GenerationResult.from_dict(data)

    def _store_cached(self, request_key: str, result: GenerationResult) -> None:
        if self._cache is None:
            return
        self._cache.set(request_key, result.to_dict(), ttl=self._cache_ttl, prefix=RESULT_CACHE_PREFIX)

    def _set_state(self, request_key: str, state: GenerationState) -> None:
        log.debug("generation_state", request_key=request_key[:12], state=state.value)
        if self._on_state_change is None:
            return
        try:
            self._on_state_change(request_key, state)
        except Exception as e:
            log.warning("generation_state_hook_failed", state=state.value, error=str(e))
