"""Circuit breaker for the remote generator.

State machine:
    closed    --(failures >= threshold)-->       open
    open      --(cooldown elapsed, next call)--> half_open
    half_open --(probe succeeds)-->              closed
    half_open --(probe fails)-->                 open

While open, calls are rejected with CircuitOpenError without running the
operation. In half_open exactly one probe runs; concurrent callers are
rejected until it settles. State is only read and written between awaits,
so transitions are atomic on a single event loop.

Usage:
    registry = CircuitBreakerRegistry()
    breaker = registry.get("resume-generation", failure_threshold=3, cooldown=30.0)
    result = await breaker.execute(lambda: client.generate(request))
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Dict, Optional, TypeVar

import structlog

from futureresume.core.exceptions import CircuitOpenError

log = structlog.get_logger()

T = TypeVar("T")


class CircuitState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass(frozen=True)
class CircuitBreakerSnapshot:
    """Read-only view of a breaker.

    Attributes:
        state: Current state.
        failures: Consecutive failures since the last success.
        last_failure_time: Clock reading of the last failure, None if never.
    """

    state: CircuitState
    failures: int
    last_failure_time: Optional[float]


class CircuitBreaker:
    """Counts consecutive failures of one operation and fails fast once open.

    Args:
        name: Operation name, used in logs and CircuitOpenError.
        failure_threshold: Consecutive failures that open the circuit.
        cooldown: Seconds the circuit stays open before admitting a probe.
        clock: Monotonic clock in seconds; injectable for tests.
    """

    def __init__(
        self,
        name: str,
        failure_threshold: int = 5,
        cooldown: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if failure_threshold < 1:
            raise ValueError("failure_threshold must be >= 1")
        if cooldown < 0:
            raise ValueError("cooldown must be >= 0")
        self.name = name
        self.failure_threshold = failure_threshold
        self.cooldown = cooldown
        self._clock = clock
        self._state = CircuitState.CLOSED
        self._failures = 0
        self._last_failure_time: Optional[float] = None
        self._probe_in_flight = False

    @property
    def is_open(self) -> bool:
        return self._state is CircuitState.OPEN

    def get_state(self) -> CircuitBreakerSnapshot:
        return CircuitBreakerSnapshot(
            state=self._state,
            failures=self._failures,
            last_failure_time=self._last_failure_time,
        )

    def reset(self) -> None:
        """Force the breaker closed and forget past failures."""
        self._state = CircuitState.CLOSED
        self._failures = 0
        self._last_failure_time = None
        self._probe_in_flight = False
        log.info("circuit_breaker_reset", name=self.name)

    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run operation under the breaker.

        Raises:
            CircuitOpenError: Circuit open (or a probe already running);
                operation was not called.
            Exception: Whatever operation raised, after recording the failure.
        """
        is_probe = self._admit()

        try:
            result = await operation()
        except Exception:
            self._on_failure()
            raise
        finally:
            if is_probe:
                self._probe_in_flight = False

        self._on_success()
        return result

    def _admit(self) -> bool:
        """Decide whether a call may run; True if it is the half-open probe."""
        if self._state is CircuitState.OPEN:
            elapsed = self._clock() - (self._last_failure_time or 0.0)
            if elapsed <= self.cooldown:
                log.debug("circuit_breaker_rejected", name=self.name, state=self._state.value)
                raise CircuitOpenError(self.name, retry_after=self.cooldown - elapsed)
            self._state = CircuitState.HALF_OPEN
            log.info("circuit_breaker_half_open", name=self.name)

        if self._state is CircuitState.HALF_OPEN:
            if self._probe_in_flight:
                log.debug("circuit_breaker_rejected", name=self.name, state=self._state.value)
                raise CircuitOpenError(
                    self.name,
                    message=f"Circuit breaker '{self.name}' is half-open - probe already in flight.",
                )
            self._probe_in_flight = True
            return True

        return False

    def _on_success(self) -> None:
        if self._state is not CircuitState.CLOSED:
            log.info("circuit_breaker_closed", name=self.name)
        self._failures = 0
        self._state = CircuitState.CLOSED

    def _on_failure(self) -> None:
        self._failures += 1
        self._last_failure_time = self._clock()

        if self._state is CircuitState.HALF_OPEN or self._failures >= self.failure_threshold:
            if self._state is not CircuitState.OPEN:
                log.warning(
                    "circuit_breaker_opened",
                    name=self.name,
                    failures=self._failures,
                    cooldown=self.cooldown,
                )
            self._state = CircuitState.OPEN


class CircuitBreakerRegistry:
    """One breaker per operation name.

    Created once by the composition root and injected where needed.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._breakers: Dict[str, CircuitBreaker] = {}

    def get(
        self,
        name: str,
        failure_threshold: int = 5,
        cooldown: float = 30.0,
    ) -> CircuitBreaker:
        """Return the breaker for name, creating it on first use.

        Thresholds only apply on creation; later calls return the existing
        instance unchanged.
        """
        breaker = self._breakers.get(name)
        if breaker is None:
            breaker = CircuitBreaker(
                name,
                failure_threshold=failure_threshold,
                cooldown=cooldown,
                clock=self._clock,
            )
            self._breakers[name] = breaker
        return breaker

    def snapshot(self) -> Dict[str, CircuitBreakerSnapshot]:
        return {name: breaker.get_state() for name, breaker in self._breakers.items()}

    def reset_all(self) -> None:
        for breaker in self._breakers.values():
            breaker.reset()
