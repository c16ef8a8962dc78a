"""Exceptions raised by futureresume.

Everything derives from :class:`FutureResumeError`, and each error exposes a
``context`` mapping that callers pass straight to structlog.

How the pipeline treats each family:

- transient failures (network blips, timeouts, 5xx): retried, then propagated
- unavailability (service not configured, circuit open): the orchestrator
  answers from the local fallback pipeline instead
- contract violations, validation and auth errors: propagated at once

Usage:
    from futureresume.core.exceptions import TransientError, CircuitOpenError

    raise TransientError("network error while calling generator", status_code=503)
"""

from typing import Any, Optional


class FutureResumeError(Exception):
    """Root of the futureresume exception tree.

    Attributes:
        message: Text shown to operators; falls back to a generic sentence.
    """

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or "A futureresume error occurred."
        super().__init__(self.message)

    @property
    def context(self) -> dict[str, Any]:
        """Structured fields for log events; empty at the root."""
        return {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class ConfigurationError(FutureResumeError):
    """Settings could not be loaded or did not validate.

    Attributes:
        config_path: Config file being read when the problem surfaced.
        key: Dotted settings key at fault, when known.
    """

    def __init__(
        self,
        config_path: str,
        key: Optional[str] = None,
        message: Optional[str] = None,
    ) -> None:
        self.config_path = config_path
        self.key = key
        if message is None:
            where = f"{config_path} ({key})" if key else config_path
            message = f"Bad configuration in {where}."
        super().__init__(message)

    @property
    def context(self) -> dict[str, Any]:
        return {"config_path": self.config_path, "key": self.key}


# === Generation Exceptions ===


class GenerationError(FutureResumeError):
    """Base exception for remote generation failures.

    Attributes:
        service: Name of the generation service involved.
    """

    def __init__(self, message: str | None = None, service: str | None = None) -> None:
        self.service = service
        super().__init__(message or "Resume generation failed.")

    @property
    def context(self) -> dict[str, Any]:
        """Return context for generation error."""
        return {"service": self.service}


class TransientError(GenerationError):
    """Retryable failure: network blip, timeout or 5xx response.

    Attributes:
        status_code: Optional HTTP status code returned by the service.
    """

    def __init__(
        self,
        message: str | None = None,
        service: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self.status_code = status_code

        if message is None:
            status_info = f" (status {status_code})" if status_code else ""
            message = f"Transient generation failure{status_info}."

        super().__init__(message, service=service)

    @property
    def context(self) -> dict[str, Any]:
        """Return context for transient error."""
        ctx = super().context
        ctx["status_code"] = self.status_code
        return ctx

    def __repr__(self) -> str:
        """Return debug representation."""
        return f"TransientError(service={self.service!r}, status_code={self.status_code!r})"


class GenerationTimeoutError(TransientError):
    """A single generation attempt exceeded its timeout.

    Attributes:
        timeout_seconds: Per-attempt budget that was exceeded.
    """

    def __init__(
        self,
        timeout_seconds: float,
        service: str | None = None,
        message: str | None = None,
    ) -> None:
        self.timeout_seconds = timeout_seconds

        if message is None:
            message = f"Generation request timed out ({timeout_seconds}s)."

        super().__init__(message, service=service)

    @property
    def context(self) -> dict[str, Any]:
        """Return context for timeout error."""
        ctx = super().context
        ctx["timeout_seconds"] = self.timeout_seconds
        return ctx

    def __repr__(self) -> str:
        """Return debug representation."""
        return (
            f"GenerationTimeoutError(service={self.service!r}, "
            f"timeout_seconds={self.timeout_seconds!r})"
        )


class ServiceNotConfiguredError(GenerationError):
    """The remote generator is unconfigured (missing URL or API key).

    The orchestrator treats this as unavailability and degrades to the
    local fallback pipeline.
    """

    def __init__(self, message: str | None = None, service: str | None = None) -> None:
        super().__init__(message or "Generation service not configured.", service=service)


class ContractViolationError(GenerationError):
    """The remote generator returned a malformed or incomplete result.

    Attributes:
        reason: Description of the contract breach.
    """

    def __init__(
        self,
        reason: str,
        service: str | None = None,
        message: str | None = None,
    ) -> None:
        self.reason = reason

        if message is None:
            message = f"Invalid generation result: {reason}."

        super().__init__(message, service=service)

    @property
    def context(self) -> dict[str, Any]:
        """Return context for contract violation."""
        ctx = super().context
        ctx["reason"] = self.reason
        return ctx

    def __repr__(self) -> str:
        """Return debug representation."""
        return f"ContractViolationError(service={self.service!r}, reason={self.reason!r})"


class ValidationError(GenerationError):
    """The request was rejected as invalid (client-side error).

    Attributes:
        errors: Individual validation messages.
    """

    def __init__(
        self,
        errors: list[str] | None = None,
        service: str | None = None,
        message: str | None = None,
    ) -> None:
        self.errors = list(errors or [])

        if message is None:
            detail = "; ".join(self.errors) if self.errors else "request rejected"
            message = f"Validation failed: {detail}."

        super().__init__(message, service=service)

    @property
    def context(self) -> dict[str, Any]:
        """Return context for validation error."""
        ctx = super().context
        ctx["errors"] = self.errors
        return ctx


class AuthenticationError(GenerationError):
    """The caller is unauthorized or its credentials are invalid."""

    def __init__(self, message: str | None = None, service: str | None = None) -> None:
        super().__init__(message or "Unauthorized: invalid credentials.", service=service)


# === Resilience Exceptions ===


class CircuitOpenError(FutureResumeError):
    """Operation rejected without being attempted because the breaker is open.

    Attributes:
        name: Name of the protected operation.
        retry_after: Seconds until the breaker admits a probe.
    """

    def __init__(
        self,
        name: str,
        retry_after: float | None = None,
        message: str | None = None,
    ) -> None:
        self.name = name
        self.retry_after = retry_after

        if message is None:
            retry_info = f" (retry after {retry_after:.1f}s)" if retry_after else ""
            message = (
                f"Circuit breaker '{name}' is open - operation not attempted{retry_info}."
            )

        super().__init__(message)

    @property
    def context(self) -> dict[str, Any]:
        """Return context for open circuit."""
        return {"name": self.name, "retry_after": self.retry_after}

    def __repr__(self) -> str:
        """Return debug representation."""
        return f"CircuitOpenError(name={self.name!r}, retry_after={self.retry_after!r})"


# === Cache Exceptions ===


class CacheError(FutureResumeError):
    """Base exception for cache storage failures.

    Storage adapters raise these; the Cache absorbs them.
    """


class StorageQuotaExceeded(CacheError):
    """Persistent store refused a write because its quota is exhausted.

    Attributes:
        key: Key that could not be written.
        quota_bytes: Configured quota.
    """

    def __init__(self, key: str, quota_bytes: int, message: str | None = None) -> None:
        self.key = key
        self.quota_bytes = quota_bytes

        if message is None:
            message = f"Storage quota of {quota_bytes} bytes exceeded writing '{key}'."

        super().__init__(message)

    @property
    def context(self) -> dict[str, Any]:
        """Return context for quota error."""
        return {"key": self.key, "quota_bytes": self.quota_bytes}


# === Background Task Exceptions ===


class BackgroundTaskError(FutureResumeError):
    """A background task body failed.

    The original exception is chained as ``__cause__``.

    Attributes:
        task_id: Identifier of the failed task.
        kind: Task kind value.
    """

    def __init__(self, task_id: str, kind: str, message: str | None = None) -> None:
        self.task_id = task_id
        self.kind = kind
        super().__init__(message or f"Background task '{task_id}' ({kind}) failed.")

    @property
    def context(self) -> dict[str, Any]:
        """Return context for task failure."""
        return {"task_id": self.task_id, "kind": self.kind}


class TaskCancelledError(FutureResumeError):
    """Raised at a task checkpoint once the task has been cancelled."""

    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__(f"Background task '{task_id}' was cancelled.")

    @property
    def context(self) -> dict[str, Any]:
        """Return context for cancellation."""
        return {"task_id": self.task_id}
