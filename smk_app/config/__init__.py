"""
Configuration: compiled-in defaults with optional settings.yaml overrides.
"""
from .defaults import DefaultConfig, get_default_config
from .loader import ConfigLoader

__all__ = ["ConfigLoader", "DefaultConfig", "get_default_config"]
