"""
Storage and configuration error classifications.

Storage errors never leave the cache layer: they are logged and the
pipeline carries on as if no cache existed.
"""

from typing import Any, Optional

from .recovery import GracefulDegradationError, UnrecoverableError


class StorageError(GracefulDegradationError):
    """Cache or consent persistence failure (quota, locked or missing engine)."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 key: Optional[str] = None, **kwargs):
        super().__init__(
            message,
            degraded_functionality="persistent_cache",
            fallback_strategy="treat_as_miss",
        )
        self.operation = operation
        self.key = key


class ConfigurationError(UnrecoverableError):
    """Configuration values failed validation."""

    def __init__(self, message: str, errors: Optional[list[Any]] = None, **kwargs):
        super().__init__(message)
        self.errors = errors or []
