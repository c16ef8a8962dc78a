"""Settings for futureresume.

Values are resolved from four sources. Earlier entries in this list beat later ones:

* ``runtime_overrides`` passed to :func:`create_settings`
* ``FUTURERESUME_*`` environment variables (``__`` separates nested keys),
  including any found in a ``.env`` beside the config file
* the YAML config file, ``~/.futureresume/config.yaml`` unless told otherwise
* field defaults below

Most callers want :func:`get_settings`::

    failure_threshold = get_settings().circuit_breaker.failure_threshold
"""

from __future__ import annotations

import threading
import warnings
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, PositiveFloat, PositiveInt, SecretStr, field_validator
from pydantic_settings import BaseSettings, EnvSettingsSource, SettingsConfigDict

from futureresume.core.exceptions import ConfigurationError

DEFAULT_CONFIG_DIR = Path.home() / ".futureresume"


# =============================================================================
# Sub-configuration Models (nested sections)
# =============================================================================


class GenerationConfig(BaseModel):
    """Remote generation service configuration."""

    function_url: Optional[str] = None
    api_key: Optional[SecretStr] = None
    attempt_timeout: Optional[PositiveFloat] = 90.0  # seconds, per attempt
    request_timeout: PositiveFloat = 120.0  # HTTP client timeout
    cache_ttl: PositiveFloat = 30 * 60.0  # 30 minutes


class RetryConfig(BaseModel):
    """Numbers for the API retry preset."""

    max_attempts: PositiveInt = 3
    base_delay: float = Field(default=2.0, ge=0)
    backoff_multiplier: float = Field(default=1.5, ge=1)
    max_delay: float = Field(default=10.0, ge=0)


class CircuitBreakerConfig(BaseModel):
    """Circuit breaker thresholds for the generation operation."""

    failure_threshold: PositiveInt = 3
    cooldown: PositiveFloat = 30.0  # seconds


class CacheConfig(BaseModel):
    """Cache configuration."""

    default_ttl: float = Field(default=5 * 60.0, ge=0)
    prefix: str = "resume-app-cache"
    cleanup_interval: PositiveFloat = 10 * 60.0
    persistent_path: Optional[str] = None

    @field_validator("prefix")
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        """Prefixes are joined with ':' so they must not contain one."""
        if not v or ":" in v:
            raise ValueError("prefix must be non-empty and must not contain ':'")
        return v


class TaskQueueConfig(BaseModel):
    """Background task queue configuration."""

    max_concurrent_tasks: PositiveInt = 3


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate renderer name."""
        if v.lower() not in {"json", "console"}:
            raise ValueError(f"Invalid log format: {v}. Must be 'json' or 'console'")
        return v.lower()


# =============================================================================
# Main Settings
# =============================================================================


class Settings(BaseSettings):
    """Main settings class with layered configuration support."""

    model_config = SettingsConfigDict(
        env_prefix="FUTURERESUME_",
        env_nested_delimiter="__",
        extra="ignore",
        populate_by_name=True,
    )

    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    circuit_breaker: CircuitBreakerConfig = Field(default_factory=CircuitBreakerConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    tasks: TaskQueueConfig = Field(default_factory=TaskQueueConfig)
    logging_config: LoggingConfig = Field(default_factory=LoggingConfig, alias="logging")

    @property
    def logging(self) -> LoggingConfig:
        """Alias for logging_config to match YAML key and common usage."""
        return self.logging_config


# =============================================================================
# Sources
# =============================================================================


def load_yaml_file(path: Path) -> Dict[str, Any]:
    """Read one YAML mapping from ``path``; an empty file yields ``{}``.

    Raises:
        ConfigurationError: The file is missing, unparsable or not a mapping.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigurationError(config_path=str(path), message=f"Config file not found: {path}")

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigurationError(config_path=str(path), message=f"Cannot parse {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            config_path=str(path),
            message=f"Expected a mapping at the top of {path}, got {type(data).__name__}",
        )
    return data


def load_system_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Like :func:`load_yaml_file`, but a missing file is simply no config."""
    resolved = Path(path).expanduser() if path is not None else DEFAULT_CONFIG_DIR / "config.yaml"
    return load_yaml_file(resolved) if resolved.exists() else {}


def merge_configs(*configs: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge mappings, right-most wins on conflicting leaves."""
    merged: Dict[str, Any] = {}
    for layer in configs:
        for key, value in layer.items():
            current = merged.get(key)
            if isinstance(current, dict) and isinstance(value, dict):
                merged[key] = merge_configs(current, value)
            else:
                merged[key] = value
    return merged


def _environment_layer() -> Dict[str, Any]:
    """FUTURERESUME_* variables as a nested mapping, as Settings would read them."""
    return EnvSettingsSource(Settings)()


def create_settings(
    system_config_path: Optional[Path] = None,
    runtime_overrides: Optional[Dict[str, Any]] = None,
) -> Settings:
    """Build a fresh :class:`Settings` from every source.

    Raises:
        ConfigurationError: A source cannot be read or the result fails validation.
    """
    config_path = (
        Path(system_config_path).expanduser()
        if system_config_path is not None
        else DEFAULT_CONFIG_DIR / "config.yaml"
    )

    dotenv_path = config_path.parent / ".env"
    if dotenv_path.exists():
        load_dotenv(dotenv_path)

    layers = merge_configs(
        load_system_config(config_path),
        _environment_layer(),
        runtime_overrides or {},
    )
    try:
        return Settings(**layers)
    except ValueError as e:
        raise ConfigurationError(
            config_path=str(config_path), message=f"Invalid configuration: {e}"
        ) from e


# =============================================================================
# Process-wide instance
# =============================================================================

_settings: Optional[Settings] = None
_settings_lock = threading.Lock()


def get_settings(
    force_reload: bool = False,
    system_config_path: Optional[Path] = None,
    runtime_overrides: Optional[Dict[str, Any]] = None,
) -> Settings:
    """Return the shared :class:`Settings`, building it on first use.

    Source arguments only matter when a build happens, i.e. on first use or
    with ``force_reload=True``; passing them otherwise emits a RuntimeWarning.
    """
    global _settings

    with _settings_lock:
        if _settings is not None and not force_reload:
            if system_config_path is not None or runtime_overrides is not None:
                warnings.warn(
                    "get_settings() already has an instance; pass force_reload=True "
                    "for the new sources to take effect",
                    RuntimeWarning,
                    stacklevel=2,
                )
            return _settings

        _settings = create_settings(
            system_config_path=system_config_path,
            runtime_overrides=runtime_overrides,
        )
        return _settings


def reset_settings() -> None:
    """Forget the shared instance so the next get_settings() rebuilds it."""
    global _settings

    with _settings_lock:
        _settings = None
