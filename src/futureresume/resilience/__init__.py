"""Failure containment: retry with backoff and circuit breaking."""

from futureresume.resilience.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerRegistry,
    CircuitBreakerSnapshot,
    CircuitState,
)
from futureresume.resilience.retry import (
    RetryOptions,
    api_retry_options,
    auth_retry_options,
    is_retryable_error,
    with_api_retry,
    with_auth_retry,
    with_retry,
)

__all__ = [
    "CircuitBreaker",
    "CircuitBreakerRegistry",
    "CircuitBreakerSnapshot",
    "CircuitState",
    "RetryOptions",
    "api_retry_options",
    "auth_retry_options",
    "is_retryable_error",
    "with_api_retry",
    "with_auth_retry",
    "with_retry",
]
