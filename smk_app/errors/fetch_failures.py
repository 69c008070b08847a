"""
Page acquisition error classifications.

Transport and protocol failures are page-level and retried with backoff.
Once the retry budget is spent the fetcher raises a single
TerminalFetchError that carries the records accumulated so far and the
last underlying cause.
"""

from typing import Any, Optional, Sequence

from .recovery import RecoverableError, UnrecoverableError


class FetchError(Exception):
    """Base class for page acquisition failures."""

    def __init__(self, message: str, offset: Optional[int] = None,
                 context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.offset = offset
        self.context = context or {}


class TransportError(FetchError, RecoverableError):
    """Network failure or non-2xx HTTP response."""

    def __init__(self, message: str, status_code: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.status_code = status_code


class ProtocolError(FetchError, RecoverableError):
    """Response body is not valid JSON or lacks an items array."""

    def __init__(self, message: str, raw_snippet: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.raw_snippet = raw_snippet


class TerminalFetchError(FetchError, UnrecoverableError):
    """Retry budget exhausted for a page; partial records are preserved."""

    def __init__(self, message: str, records: Sequence[Any] = (),
                 attempts: int = 0, **kwargs):
        super().__init__(message, **kwargs)
        self.records = tuple(records)
        self.attempts = attempts

    @property
    def last_error(self) -> Optional[BaseException]:
        """The page error that exhausted the retry budget."""
        return self.__cause__
