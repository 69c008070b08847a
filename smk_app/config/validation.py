"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_fetch_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate pagination and retry parameters."""
        errors = []

        if "page_size" in params:
            value = params["page_size"]
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                errors.append(ValidationError(
                    field="page_size",
                    message="Must be a positive integer",
                    value=value
                ))

        if "max_retries" in params:
            value = params["max_retries"]
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                errors.append(ValidationError(
                    field="max_retries",
                    message="Must be a non-negative integer",
                    value=value
                ))

        if "backoff_base_ms" in params:
            value = params["backoff_base_ms"]
            if not _is_number(value) or value < 0:
                errors.append(ValidationError(
                    field="backoff_base_ms",
                    message="Must be a non-negative number",
                    value=value
                ))

        if "backoff_multiplier" in params:
            value = params["backoff_multiplier"]
            if not _is_number(value) or value < 1:
                errors.append(ValidationError(
                    field="backoff_multiplier",
                    message="Must be a number >= 1",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_cache_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate cache parameters."""
        errors = []

        if "ttl_ms" in params:
            value = params["ttl_ms"]
            if not _is_number(value) or value <= 0:
                errors.append(ValidationError(
                    field="ttl_ms",
                    message="Must be a positive number",
                    value=value
                ))

        if "schema_version" in params:
            value = params["schema_version"]
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                errors.append(ValidationError(
                    field="schema_version",
                    message="Must be a positive integer",
                    value=value
                ))

        if "key" in params:
            value = params["key"]
            if not isinstance(value, str) or not value:
                errors.append(ValidationError(
                    field="key",
                    message="Must be a non-empty string",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_scheduler_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate debounce parameters."""
        errors = []

        if "debounce_ms" in params:
            value = params["debounce_ms"]
            if not _is_number(value) or value < 0:
                errors.append(ValidationError(
                    field="debounce_ms",
                    message="Must be a non-negative number",
                    value=value
                ))

        if "progress_throttle_ms" in params:
            value = params["progress_throttle_ms"]
            if not _is_number(value) or value < 0:
                errors.append(ValidationError(
                    field="progress_throttle_ms",
                    message="Must be a non-negative number",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_activation_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate readiness threshold and margin."""
        errors = []

        if "threshold" in params:
            value = params["threshold"]
            if not _is_number(value) or value < 0 or value > 1:
                errors.append(ValidationError(
                    field="threshold",
                    message="Must be a number between 0 and 1",
                    value=value
                ))

        if "margin" in params:
            value = params["margin"]
            if not _is_number(value) or value < 0 or value > 1:
                errors.append(ValidationError(
                    field="margin",
                    message="Must be a number between 0 and 1",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = []

        if "fetch" in config:
            errors.extend(ConfigValidator.validate_fetch_params(config["fetch"]))

        if "cache" in config:
            errors.extend(ConfigValidator.validate_cache_params(config["cache"]))

        if "scheduler" in config:
            errors.extend(ConfigValidator.validate_scheduler_params(config["scheduler"]))

        if "activation" in config:
            errors.extend(ConfigValidator.validate_activation_params(config["activation"]))

        return errors
