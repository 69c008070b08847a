"""
Sequential paginated fetcher with retry, backoff and cooperative cancellation.

Pages are requested one at a time starting at offset 0. A page shorter than
the page size (including an empty page) is the last one. Page-level errors
are retried with backoff; once a page has failed max_retries times the fetch
ends with TerminalFetchError carrying every record fetched so far.
Cancellation interrupts the in-flight request or backoff sleep and resolves
with the records accumulated up to that point.
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable, Optional

from ..config.defaults import FetchParams
from ..errors import ProtocolError, RecoverableError, TerminalFetchError
from ..logging.config import get_fetch_logger, log_fetch_transition, log_page_fetched
from .backoff import BackoffPolicy
from .source import PageSource

PageHandler = Callable[[list[dict[str, Any]]], Iterable[Any]]
ProgressHandler = Callable[[int, list[Any]], None]


class FetchState(str, Enum):
    """Fetcher lifecycle states."""
    IDLE = "idle"
    FETCHING = "fetching"
    RETRYING = "retrying"
    DONE = "done"
    FAILED = "failed"
    ABORTED = "aborted"


class FetchStatus(str, Enum):
    """How a fetch that returned (rather than raised) ended."""
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass
class FetchSession:
    """Transient state of one fetch_all call."""
    offset: int = 0
    retry_count: int = 0
    pages: int = 0
    requests: int = 0
    records: list[Any] = field(default_factory=list)
    cancel_event: asyncio.Event = field(default_factory=asyncio.Event)
    finished: asyncio.Event = field(default_factory=asyncio.Event)

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def cancel(self) -> None:
        self.cancel_event.set()


@dataclass(frozen=True)
class FetchResult:
    """Outcome of a fetch that completed or was cancelled."""
    records: tuple[Any, ...]
    status: FetchStatus
    pages: int
    requests: int

    @property
    def completed(self) -> bool:
        return self.status == FetchStatus.COMPLETED


class _FetchCancelled(Exception):
    """Internal signal: the in-flight request was interrupted by cancellation."""


class PaginatedFetcher:
    """Fetches every page of a PageSource, one request at a time."""

    def __init__(
        self,
        source: PageSource,
        page_size: int = 2000,
        max_retries: int = 3,
        backoff: Optional[BackoffPolicy] = None,
    ) -> None:
        if page_size <= 0:
            raise ValueError("page_size must be positive")

        self.source = source
        self.page_size = page_size
        self.max_retries = max_retries
        self.backoff = backoff or BackoffPolicy()
        self.logger = get_fetch_logger(__name__)
        self.state = FetchState.IDLE
        self._active: Optional[FetchSession] = None

    @classmethod
    def from_config(cls, source: PageSource, params: FetchParams) -> "PaginatedFetcher":
        return cls(
            source=source,
            page_size=params.page_size,
            max_retries=params.max_retries,
            backoff=BackoffPolicy.from_config(params),
        )

    @property
    def is_active(self) -> bool:
        return self._active is not None

    def cancel(self) -> None:
        """Cancel the active fetch, if any."""
        if self._active is not None:
            self._active.cancel()

    async def fetch_all(
        self,
        on_page: PageHandler,
        cancel: Optional[asyncio.Event] = None,
        on_progress: Optional[ProgressHandler] = None,
    ) -> FetchResult:
        """
        Fetch all pages.

        Args:
            on_page: Turns a raw page into normalized records
            cancel: Event that cancels this fetch when set
            on_progress: Called after each non-empty page with
                (items fetched so far, records produced by this page)

        Returns:
            FetchResult with status COMPLETED or CANCELLED

        Raises:
            TerminalFetchError: A page failed max_retries times
        """
        # Only one fetch may write at a time: cancel and drain the previous one
        while self._active is not None:
            previous = self._active
            self.logger.info("Cancelling active fetch before starting a new one",
                             offset=previous.offset)
            previous.cancel()
            await previous.finished.wait()

        session = FetchSession(cancel_event=cancel or asyncio.Event())
        self._active = session

        try:
            return await self._run(session, on_page, on_progress)
        finally:
            session.finished.set()
            if self._active is session:
                self._active = None

    async def _run(
        self,
        session: FetchSession,
        on_page: PageHandler,
        on_progress: Optional[ProgressHandler],
    ) -> FetchResult:
        self._transition(FetchState.FETCHING, "start", offset=session.offset)

        while True:
            if session.cancelled:
                return self._abort(session)

            try:
                page = await self._request(session)
            except _FetchCancelled:
                return self._abort(session)
            except RecoverableError as e:
                session.retry_count += 1
                e.retry_count = session.retry_count
                e.max_retries = self.max_retries

                if session.retry_count >= self.max_retries:
                    self._transition(FetchState.FAILED, "retries_exhausted",
                                     offset=session.offset, attempts=session.retry_count)
                    self.logger.error(
                        "Data fetch failed",
                        offset=session.offset,
                        attempts=session.retry_count,
                        records=len(session.records),
                        error=str(e)
                    )
                    raise TerminalFetchError(
                        f"Failed after {session.retry_count} attempts: {e}",
                        records=session.records,
                        attempts=session.retry_count,
                        offset=session.offset,
                    ) from e

                delay = self.backoff.delay_seconds(session.retry_count)
                self.logger.warning(
                    "Fetch attempt failed, retrying",
                    offset=session.offset,
                    attempt=session.retry_count,
                    retry_in_seconds=delay,
                    error=str(e)
                )
                self._transition(FetchState.RETRYING, "page_error",
                                 offset=session.offset, attempt=session.retry_count)

                if await self._sleep_or_cancel(session, delay):
                    return self._abort(session)

                self._transition(FetchState.FETCHING, "retry", offset=session.offset)
                continue

            attempt = session.retry_count + 1
            session.retry_count = 0

            normalized = list(on_page(page))
            session.records.extend(normalized)
            session.pages += 1

            log_page_fetched(
                self.logger,
                offset=session.offset,
                received=len(page),
                accepted=len(normalized),
                total=len(session.records),
                attempt=attempt
            )

            if page and on_progress is not None:
                on_progress(session.offset + len(page), normalized)

            if len(page) < self.page_size:
                self._transition(FetchState.DONE, "exhausted",
                                 pages=session.pages, records=len(session.records))
                return FetchResult(
                    records=tuple(session.records),
                    status=FetchStatus.COMPLETED,
                    pages=session.pages,
                    requests=session.requests,
                )

            session.offset += self.page_size

    async def _request(self, session: FetchSession) -> list[dict[str, Any]]:
        """One page request that loses the race against cancellation."""
        session.requests += 1
        request = asyncio.ensure_future(self.source.fetch_page(session.offset, self.page_size))
        waiter = asyncio.ensure_future(session.cancel_event.wait())

        try:
            done, _ = await asyncio.wait({request, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            request.cancel()
            raise
        finally:
            waiter.cancel()

        if request in done:
            page = request.result()
            if not isinstance(page, list):
                raise ProtocolError("Page source returned a non-list page",
                                    offset=session.offset)
            return page

        request.cancel()
        await asyncio.gather(request, return_exceptions=True)
        raise _FetchCancelled()

    async def _sleep_or_cancel(self, session: FetchSession, delay: float) -> bool:
        """Back off for delay seconds. Returns True if cancelled meanwhile."""
        if delay <= 0:
            return session.cancelled

        try:
            await asyncio.wait_for(session.cancel_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return False
        return True

    def _abort(self, session: FetchSession) -> FetchResult:
        self._transition(FetchState.ABORTED, "cancelled",
                         offset=session.offset, records=len(session.records))
        self.logger.info("Fetch cancelled", offset=session.offset, records=len(session.records))
        return FetchResult(
            records=tuple(session.records),
            status=FetchStatus.CANCELLED,
            pages=session.pages,
            requests=session.requests,
        )

    def _transition(self, new_state: FetchState, trigger: str, **context: Any) -> None:
        log_fetch_transition(
            self.logger,
            from_state=self.state.value,
            to_state=new_state.value,
            trigger=trigger,
            context=context or None
        )
        self.state = new_state
