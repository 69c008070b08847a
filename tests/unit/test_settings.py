"""Unit tests for configuration management."""

from pathlib import Path

import pytest

from smk_app.config import ConfigLoader, get_default_config
from smk_app.config.validation import ConfigValidator
from smk_app.errors import ConfigurationError


class TestDefaultConfig:
    """Test suite for default configuration."""

    def test_default_values(self) -> None:
        """Compiled-in constants."""
        config = get_default_config()

        assert config.fetch.page_size == 2000
        assert config.fetch.max_retries == 3
        assert config.fetch.backoff_base_ms == 1000
        assert config.cache.ttl_ms == 7 * 24 * 60 * 60 * 1000
        assert config.cache.schema_version == 1
        assert config.cache.key == "smk_data_cache"
        assert config.scheduler.debounce_ms == 300
        assert config.consent.expiry_days == 365
        assert config.api.base_url == "https://api.smk.dk/api/v1/art/search/"


class TestConfigLoader:
    """Test suite for configuration loader."""

    def test_loader_creation(self) -> None:
        loader = ConfigLoader.create()
        assert isinstance(loader.config_dir, Path)

    def test_defaults_without_settings_file(self, tmp_path) -> None:
        loader = ConfigLoader.create(tmp_path)

        assert loader.load_overrides() == {}
        assert loader.load() == get_default_config()

    def test_explicit_overrides(self, tmp_path) -> None:
        loader = ConfigLoader.create(tmp_path)

        config = loader.load({"fetch": {"page_size": 500}})

        assert config.fetch.page_size == 500
        # Other defaults should remain
        assert config.fetch.max_retries == 3

    def test_settings_yaml(self, tmp_path) -> None:
        (tmp_path / "settings.yaml").write_text(
            "cache:\n"
            "  ttl_ms: 60000\n"
            "  schema_version: 2\n"
            "api:\n"
            "  language: da\n"
        )
        loader = ConfigLoader.create(tmp_path)

        config = loader.load()

        assert config.cache.ttl_ms == 60000
        assert config.cache.schema_version == 2
        assert config.api.language == "da"
        assert config.cache.key == "smk_data_cache"

    def test_empty_settings_yaml(self, tmp_path) -> None:
        (tmp_path / "settings.yaml").write_text("")

        assert ConfigLoader.create(tmp_path).load_overrides() == {}

    def test_unknown_keys_ignored(self, tmp_path) -> None:
        config = ConfigLoader.create(tmp_path).load({"fetch": {"not_a_field": 1}, "extra": {}})

        assert config == get_default_config()

    def test_invalid_values_raise(self, tmp_path) -> None:
        loader = ConfigLoader.create(tmp_path)

        with pytest.raises(ConfigurationError) as exc_info:
            loader.load({"fetch": {"page_size": 0}, "cache": {"ttl_ms": -1}})

        fields = {err.field for err in exc_info.value.errors}
        assert fields == {"page_size", "ttl_ms"}


class TestConfigValidator:
    """Test suite for configuration validation."""

    def test_valid_defaults(self) -> None:
        loader = ConfigLoader.create()
        assert ConfigValidator.validate_config(loader.merge_config({})) == []

    @pytest.mark.parametrize("params", [
        {"page_size": -5},
        {"page_size": True},
        {"max_retries": -1},
        {"backoff_base_ms": "fast"},
        {"backoff_multiplier": 0.5},
    ])
    def test_invalid_fetch_params(self, params) -> None:
        assert len(ConfigValidator.validate_fetch_params(params)) == 1

    def test_invalid_cache_params(self) -> None:
        errors = ConfigValidator.validate_cache_params({"schema_version": 0, "key": ""})
        assert {e.field for e in errors} == {"schema_version", "key"}

    def test_invalid_scheduler_params(self) -> None:
        errors = ConfigValidator.validate_scheduler_params({"debounce_ms": -1})
        assert errors[0].field == "debounce_ms"
        assert errors[0].value == -1

    def test_invalid_activation_params(self) -> None:
        errors = ConfigValidator.validate_activation_params({"threshold": 1.5, "margin": -0.1})
        assert len(errors) == 2
