"""User-facing error reporting.

Maps exceptions raised by the pipeline to stable error codes, user messages
and severities, logs them at a matching level and keeps a bounded history
for diagnostics.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Deque, Dict, List, Optional, Tuple

import structlog

from futureresume.core.exceptions import (
    AuthenticationError,
    CircuitOpenError,
    ContractViolationError,
    FutureResumeError,
    GenerationTimeoutError,
    ServiceNotConfiguredError,
    TransientError,
    ValidationError,
)

log = structlog.get_logger()


class ErrorSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


ERROR_MAPPINGS: Dict[str, Tuple[str, ErrorSeverity]] = {
    "AUTH_FAILED": ("Authentication failed. Please sign in again.", ErrorSeverity.MEDIUM),
    "RESUME_GENERATION_FAILED": (
        "Resume generation failed. Please check your inputs and try again.",
        ErrorSeverity.HIGH,
    ),
    "RESUME_API_TIMEOUT": (
        "Resume generation is taking longer than expected. Please try again.",
        ErrorSeverity.MEDIUM,
    ),
    "RESUME_INVALID_INPUT": (
        "Please check your resume content and job description are properly formatted.",
        ErrorSeverity.LOW,
    ),
    "RESUME_QUOTA_EXCEEDED": (
        "You've reached your monthly resume generation limit. Consider upgrading your plan.",
        ErrorSeverity.MEDIUM,
    ),
    "SERVICE_DEGRADED": (
        "The generation service is unavailable. Using basic offline mode.",
        ErrorSeverity.LOW,
    ),
    "API_RATE_LIMITED": (
        "Too many requests. Please wait a moment and try again.",
        ErrorSeverity.MEDIUM,
    ),
    "API_SERVER_ERROR": (
        "Server error occurred. Please try again in a few minutes.",
        ErrorSeverity.HIGH,
    ),
    "API_NETWORK_ERROR": (
        "Network error. Please check your connection and try again.",
        ErrorSeverity.MEDIUM,
    ),
    "VALIDATION_ERROR": ("Please check your input and try again.", ErrorSeverity.LOW),
    "UNKNOWN_ERROR": ("An unexpected error occurred. Please try again.", ErrorSeverity.MEDIUM),
}

# Ordered: first match wins
_MESSAGE_RULES: List[Tuple[Tuple[str, ...], str]] = [
    (("auth", "unauthorized"), "AUTH_FAILED"),
    (("network", "fetch"), "API_NETWORK_ERROR"),
    (("timeout",), "RESUME_API_TIMEOUT"),
    (("rate limit", "too many"), "API_RATE_LIMITED"),
    (("validation", "invalid"), "VALIDATION_ERROR"),
    (("quota", "limit"), "RESUME_QUOTA_EXCEEDED"),
]

_SEVERITY_LOG_LEVEL = {
    ErrorSeverity.CRITICAL: "critical",
    ErrorSeverity.HIGH: "error",
    ErrorSeverity.MEDIUM: "warning",
    ErrorSeverity.LOW: "info",
}


@dataclass
class AppError:
    """Normalised error handed to presentation code."""

    code: str
    message: str
    user_message: str
    severity: ErrorSeverity
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    context: Dict[str, Any] = field(default_factory=dict)
    original: Optional[BaseException] = None


def infer_error_code(error: BaseException) -> str:
    """Return the error code for an exception, typed classes first."""
    if isinstance(error, AuthenticationError):
        return "AUTH_FAILED"
    if isinstance(error, ValidationError):
        return "RESUME_INVALID_INPUT"
    if isinstance(error, GenerationTimeoutError):
        return "RESUME_API_TIMEOUT"
    if isinstance(error, TransientError):
        if error.status_code is not None and error.status_code >= 500:
            return "API_SERVER_ERROR"
        return "API_NETWORK_ERROR"
    if isinstance(error, (ServiceNotConfiguredError, CircuitOpenError)):
        return "SERVICE_DEGRADED"
    if isinstance(error, ContractViolationError):
        return "RESUME_GENERATION_FAILED"

    message = str(error).lower()
    for needles, code in _MESSAGE_RULES:
        if any(needle in message for needle in needles):
            return code
    return "UNKNOWN_ERROR"


class ErrorReporter:
    """Create, log and remember :class:`AppError` records.

    Args:
        max_reports: Size of the in-memory history.
    """

    def __init__(self, max_reports: int = 100) -> None:
        if max_reports < 1:
            raise ValueError("max_reports must be >= 1")
        self._reports: Deque[AppError] = deque(maxlen=max_reports)

    def create_error(
        self,
        code: str,
        original: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> AppError:
        user_message, severity = ERROR_MAPPINGS.get(code, ERROR_MAPPINGS["UNKNOWN_ERROR"])
        ctx: Dict[str, Any] = {}
        if isinstance(original, FutureResumeError):
            ctx.update(original.context)
        if context:
            ctx.update(context)
        return AppError(
            code=code,
            message=str(original) if original is not None else f"Error code: {code}",
            user_message=user_message,
            severity=severity,
            context=ctx,
            original=original,
        )

    def handle(
        self,
        error: BaseException | str,
        context: Optional[Dict[str, Any]] = None,
    ) -> AppError:
        """Normalise, log and store an error."""
        if isinstance(error, str):
            app_error = self.create_error("UNKNOWN_ERROR", RuntimeError(error), context)
        else:
            app_error = self.create_error(infer_error_code(error), error, context)

        getattr(log, _SEVERITY_LOG_LEVEL[app_error.severity])(
            "app_error",
            code=app_error.code,
            error_message=app_error.message,
            severity=app_error.severity.value,
            **app_error.context,
        )
        self._reports.append(app_error)
        return app_error

    @property
    def reports(self) -> List[AppError]:
        """Return stored reports, oldest first."""
        return list(self._reports)

    def clear(self) -> None:
        self._reports.clear()
