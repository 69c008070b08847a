"""
Paginated acquisition of the remote collection.
"""
from .backoff import BackoffPolicy
from .fetcher import FetchResult, FetchSession, FetchState, FetchStatus, PaginatedFetcher
from .source import HttpPageSource, PageSource

__all__ = [
    "BackoffPolicy",
    "FetchResult",
    "FetchSession",
    "FetchState",
    "FetchStatus",
    "HttpPageSource",
    "PageSource",
    "PaginatedFetcher",
]
