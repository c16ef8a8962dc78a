"""Unit tests for futureresume Configuration System.

Tests layered YAML configuration loading with Pydantic validation.
Covers defaults, system config, runtime overrides, environment variables,
validation errors and singleton behavior.
"""

from pathlib import Path

import pytest
import yaml

from futureresume.core.config import (
    CacheConfig,
    CircuitBreakerConfig,
    GenerationConfig,
    LoggingConfig,
    RetryConfig,
    Settings,
    TaskQueueConfig,
    create_settings,
    get_settings,
    load_system_config,
    load_yaml_file,
    merge_configs,
    reset_settings,
)
from futureresume.core.exceptions import ConfigurationError


def _write_yaml(path: Path, content: dict) -> Path:
    path.write_text(yaml.safe_dump(content), encoding="utf-8")
    return path


# =============================================================================
# Default Value Tests
# =============================================================================


class TestDefaultValues:
    """Test sensible defaults for all optional keys."""

    def test_generation_defaults(self) -> None:
        config = GenerationConfig()
        assert config.function_url is None
        assert config.api_key is None
        assert config.attempt_timeout == 90.0
        assert config.cache_ttl == 1800.0

    def test_retry_defaults(self) -> None:
        config = RetryConfig()
        assert config.max_attempts == 3
        assert config.base_delay == 2.0
        assert config.backoff_multiplier == 1.5
        assert config.max_delay == 10.0

    def test_circuit_breaker_defaults(self) -> None:
        config = CircuitBreakerConfig()
        assert config.failure_threshold == 3
        assert config.cooldown == 30.0

    def test_cache_defaults(self) -> None:
        config = CacheConfig()
        assert config.default_ttl == 300.0
        assert config.prefix == "resume-app-cache"
        assert config.cleanup_interval == 600.0
        assert config.persistent_path is None

    def test_task_queue_defaults(self) -> None:
        assert TaskQueueConfig().max_concurrent_tasks == 3

    def test_logging_defaults(self) -> None:
        config = LoggingConfig()
        assert config.level == "INFO"
        assert config.format == "json"

    def test_settings_exposes_logging_alias(self) -> None:
        settings = Settings()
        assert settings.logging is settings.logging_config


# =============================================================================
# Validation Tests
# =============================================================================


class TestValidation:
    def test_prefix_with_colon_rejected(self) -> None:
        with pytest.raises(ValueError):
            CacheConfig(prefix="a:b")

    def test_invalid_log_level_rejected(self) -> None:
        with pytest.raises(ValueError):
            LoggingConfig(level="LOUD")

    def test_log_level_normalized_to_upper(self) -> None:
        assert LoggingConfig(level="debug").level == "DEBUG"

    def test_invalid_log_format_rejected(self) -> None:
        with pytest.raises(ValueError):
            LoggingConfig(format="xml")

    def test_backoff_multiplier_below_one_rejected(self) -> None:
        with pytest.raises(ValueError):
            RetryConfig(backoff_multiplier=0.5)

    def test_invalid_override_raises_configuration_error(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError):
            create_settings(
                system_config_path=tmp_path / "missing.yaml",
                runtime_overrides={"circuit_breaker": {"failure_threshold": 0}},
            )


# =============================================================================
# YAML Loading Tests
# =============================================================================


class TestYamlLoading:
    def test_load_yaml_file(self, tmp_path: Path) -> None:
        path = _write_yaml(tmp_path / "config.yaml", {"tasks": {"max_concurrent_tasks": 5}})
        assert load_yaml_file(path) == {"tasks": {"max_concurrent_tasks": 5}}

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            load_yaml_file(tmp_path / "nope.yaml")
        assert "not found" in str(exc_info.value)

    def test_invalid_yaml_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("tasks: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_yaml_file(path)

    def test_non_mapping_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_yaml_file(path)

    def test_empty_file_is_empty_dict(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_yaml_file(path) == {}

    def test_missing_system_config_is_empty(self, tmp_path: Path) -> None:
        assert load_system_config(tmp_path / "absent.yaml") == {}


# =============================================================================
# Layering Tests
# =============================================================================


class TestLayering:
    def test_merge_configs_deep_merges(self) -> None:
        merged = merge_configs(
            {"cache": {"prefix": "a", "default_ttl": 10}},
            {"cache": {"prefix": "b"}},
        )
        assert merged == {"cache": {"prefix": "b", "default_ttl": 10}}

    def test_system_config_applied(self, tmp_path: Path) -> None:
        path = _write_yaml(tmp_path / "config.yaml", {"cache": {"prefix": "custom"}})
        settings = create_settings(system_config_path=path)
        assert settings.cache.prefix == "custom"

    def test_runtime_overrides_win_over_system_config(self, tmp_path: Path) -> None:
        path = _write_yaml(tmp_path / "config.yaml", {"tasks": {"max_concurrent_tasks": 5}})
        settings = create_settings(
            system_config_path=path,
            runtime_overrides={"tasks": {"max_concurrent_tasks": 7}},
        )
        assert settings.tasks.max_concurrent_tasks == 7

    def test_environment_variable_applied(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setenv("FUTURERESUME_CIRCUIT_BREAKER__FAILURE_THRESHOLD", "9")
        settings = create_settings(system_config_path=tmp_path / "absent.yaml")
        assert settings.circuit_breaker.failure_threshold == 9

    def test_environment_beats_system_config(self, tmp_path: Path, monkeypatch) -> None:
        path = _write_yaml(tmp_path / "config.yaml", {"cache": {"prefix": "from-file", "default_ttl": 42}})
        monkeypatch.setenv("FUTURERESUME_CACHE__PREFIX", "from-env")

        settings = create_settings(system_config_path=path)

        assert settings.cache.prefix == "from-env"
        assert settings.cache.default_ttl == 42

    def test_runtime_overrides_beat_environment(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setenv("FUTURERESUME_TASKS__MAX_CONCURRENT_TASKS", "4")
        settings = create_settings(
            system_config_path=tmp_path / "absent.yaml",
            runtime_overrides={"tasks": {"max_concurrent_tasks": 6}},
        )
        assert settings.tasks.max_concurrent_tasks == 6

    def test_api_key_loaded_from_dotenv(self, tmp_path: Path) -> None:
        (tmp_path / ".env").write_text("FUTURERESUME_GENERATION__API_KEY=secret-key\n", encoding="utf-8")
        settings = create_settings(system_config_path=tmp_path / "config.yaml")
        assert settings.generation.api_key is not None
        assert settings.generation.api_key.get_secret_value() == "secret-key"
        assert "secret-key" not in repr(settings.generation)


# =============================================================================
# Singleton Tests
# =============================================================================


class TestSingleton:
    def test_get_settings_returns_same_instance(self, tmp_path: Path) -> None:
        first = get_settings(system_config_path=tmp_path / "absent.yaml")
        assert get_settings() is first

    def test_force_reload_creates_new_instance(self, tmp_path: Path) -> None:
        first = get_settings(system_config_path=tmp_path / "absent.yaml")
        second = get_settings(force_reload=True, system_config_path=tmp_path / "absent.yaml")
        assert second is not first

    def test_ignored_arguments_warn(self, tmp_path: Path) -> None:
        get_settings(system_config_path=tmp_path / "absent.yaml")
        with pytest.warns(RuntimeWarning):
            get_settings(runtime_overrides={"tasks": {"max_concurrent_tasks": 2}})

    def test_reset_settings(self, tmp_path: Path) -> None:
        first = get_settings(system_config_path=tmp_path / "absent.yaml")
        reset_settings()
        assert get_settings(system_config_path=tmp_path / "absent.yaml") is not first
