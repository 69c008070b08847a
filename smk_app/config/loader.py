"""Configuration loader with 2-tier parameter precedence."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from ..errors import ConfigurationError
from .defaults import (
    ActivationParams,
    ApiParams,
    CacheParams,
    ConsentParams,
    DefaultConfig,
    FetchParams,
    SchedulerParams,
    get_default_config,
)
from .validation import ConfigValidator

_SECTIONS = {
    "api": ApiParams,
    "fetch": FetchParams,
    "cache": CacheParams,
    "consent": ConsentParams,
    "scheduler": SchedulerParams,
    "activation": ActivationParams,
}


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading: settings.yaml overrides compiled-in defaults."""

    config_dir: Path
    defaults: DefaultConfig

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_config(),
        )

    def load_overrides(self) -> dict[str, Any]:
        """Load deployment overrides from settings.yaml, if present."""
        settings_file = self.config_dir / "settings.yaml"

        if not settings_file.exists():
            return {}

        with open(settings_file) as f:
            settings = yaml.safe_load(f)

        return settings or {}

    def merge_config(self, overrides: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Merge configuration with 2-tier precedence.

        Priority order:
        1. Explicit overrides, else settings.yaml (highest priority)
        2. Compiled-in defaults (lowest priority)
        """
        config = self._dataclass_to_dict(self.defaults)

        if overrides is None:
            overrides = self.load_overrides()

        return self._deep_merge(config, overrides)

    def load(self, overrides: Optional[dict[str, Any]] = None) -> DefaultConfig:
        """Build a validated DefaultConfig from defaults plus overrides."""
        merged = self.merge_config(overrides)

        errors = ConfigValidator.validate_config(merged)
        if errors:
            details = "; ".join(f"{err.field}: {err.message} (got: {err.value})" for err in errors)
            raise ConfigurationError(f"Invalid configuration: {details}", errors=errors)

        sections = {}
        for name, params_cls in _SECTIONS.items():
            values = merged.get(name, {})
            known = {k: v for k, v in values.items() if k in params_cls.__dataclass_fields__}
            sections[name] = params_cls(**known)

        return DefaultConfig(**sections)

    def _dataclass_to_dict(self, obj: Any) -> dict[str, Any]:
        """Convert nested dataclasses to dictionary."""
        if hasattr(obj, '__dataclass_fields__'):
            result = {}
            for field_name in obj.__dataclass_fields__:
                value = getattr(obj, field_name)
                if hasattr(value, '__dataclass_fields__'):
                    result[field_name] = self._dataclass_to_dict(value)
                else:
                    result[field_name] = value
            return result
        return obj  # type: ignore[no-any-return]

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
