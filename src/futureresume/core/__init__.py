"""Core module for futureresume.

Exports the core components: exceptions, configuration and error reporting.
"""

from futureresume.core.exceptions import (
    FutureResumeError,
    ConfigurationError,
    GenerationError,
    TransientError,
    GenerationTimeoutError,
    ServiceNotConfiguredError,
    ContractViolationError,
    ValidationError,
    AuthenticationError,
    CircuitOpenError,
    CacheError,
    StorageQuotaExceeded,
    BackgroundTaskError,
    TaskCancelledError,
)
from futureresume.core.config import (
    get_settings,
    reset_settings,
    create_settings,
    Settings,
    GenerationConfig,
    RetryConfig,
    CircuitBreakerConfig,
    CacheConfig,
    TaskQueueConfig,
    LoggingConfig,
)
from futureresume.core.error_reporting import AppError, ErrorReporter, ErrorSeverity

__all__ = [
    # Exceptions
    "FutureResumeError",
    "ConfigurationError",
    "GenerationError",
    "TransientError",
    "GenerationTimeoutError",
    "ServiceNotConfiguredError",
    "ContractViolationError",
    "ValidationError",
    "AuthenticationError",
    "CircuitOpenError",
    "CacheError",
    "StorageQuotaExceeded",
    "BackgroundTaskError",
    "TaskCancelledError",
    # Configuration
    "get_settings",
    "reset_settings",
    "create_settings",
    "Settings",
    "GenerationConfig",
    "RetryConfig",
    "CircuitBreakerConfig",
    "CacheConfig",
    "TaskQueueConfig",
    "LoggingConfig",
    # Error reporting
    "AppError",
    "ErrorReporter",
    "ErrorSeverity",
]
