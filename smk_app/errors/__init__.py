"""
Error classification for the collection loader.

Page-level fetch errors are retried, terminal fetch errors are surfaced once,
storage errors are absorbed.
"""

from .fetch_failures import (
    FetchError,
    TransportError,
    ProtocolError,
    TerminalFetchError,
)
from .storage_failures import (
    StorageError,
    ConfigurationError,
)
from .recovery import (
    RecoverableError,
    UnrecoverableError,
    GracefulDegradationError,
)

__all__ = [
    # Fetch Errors
    "FetchError",
    "TransportError",
    "ProtocolError",
    "TerminalFetchError",
    # Storage / Config
    "StorageError",
    "ConfigurationError",
    # Recovery Categories
    "RecoverableError",
    "UnrecoverableError",
    "GracefulDegradationError",
]
