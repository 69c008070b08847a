"""
Session orchestrator.

Coordinates one browsing session's data load:
Consent → Cache → Fetcher → Dataset → Debouncer → Activation → Consumers
"""

import asyncio
from typing import Any, Callable, Iterable, Optional

from .config.defaults import DefaultConfig, get_default_config
from .consent import ConsentGate, ConsentState, ConsentStore
from .data.models import Artwork
from .data.normalizer import normalize_items
from .errors import TerminalFetchError
from .fetch import FetchResult, HttpPageSource, PageSource, PaginatedFetcher
from .logging.config import get_logger
from .persistence import CacheEntry, CacheMetadata, CacheStore
from .scheduling import (
    ConsumerCallback,
    ConsumerRegistration,
    Debouncer,
    LazyActivationManager,
    ReadinessSource,
    Throttle,
)
from .status import StatusBoard

Normalizer = Callable[[list[dict[str, Any]]], Iterable[Any]]

logger = get_logger(__name__)


class DataSession:
    """
    Owns the dataset for one session and drives its consumers.

    The dataset is only ever written by the current fetch. Consumers receive
    tuple snapshots, so a snapshot handed out is never mutated afterwards.
    """

    def __init__(
        self,
        config: Optional[DefaultConfig] = None,
        source: Optional[PageSource] = None,
        cache: Optional[CacheStore] = None,
        consent: Optional[ConsentGate] = None,
        normalizer: Normalizer = normalize_items,
        status: Optional[StatusBoard] = None,
    ) -> None:
        self.config = config or get_default_config()
        self.logger = logger
        self.cache_key = self.config.cache.key

        self.source = source or HttpPageSource.from_config(self.config.api)
        self.cache = cache or CacheStore(
            db_path=self.config.cache.db_path,
            ttl_ms=self.config.cache.ttl_ms,
            schema_version=self.config.cache.schema_version,
            record_factory=Artwork.from_dict,
        )
        self.consent = consent or ConsentGate(ConsentStore(
            path=self.config.consent.path,
            expiry_days=self.config.consent.expiry_days,
        ))
        self.normalizer = normalizer
        self.status = status or StatusBoard()

        self.fetcher = PaginatedFetcher.from_config(self.source, self.config.fetch)
        self.activation = LazyActivationManager(snapshot_provider=self.snapshot)
        self.scheduler = Debouncer(self._notify_consumers, wait_ms=self.config.scheduler.debounce_ms)
        self._report_progress = Throttle(self.status.update_loading,
                                         wait_ms=self.config.scheduler.progress_throttle_ms)

        self._records: list[Any] = []
        self._snapshot: tuple[Any, ...] = ()
        self._generation = 0
        self.data_source: Optional[str] = None
        self.last_result: Optional[FetchResult] = None
        self.last_error: Optional[TerminalFetchError] = None

        self._unsubscribe_consent = self.consent.subscribe(self._on_consent_change)

    # Dataset

    def snapshot(self) -> tuple[Any, ...]:
        """Immutable view of the dataset as it is right now."""
        if len(self._snapshot) != len(self._records):
            self._snapshot = tuple(self._records)
        return self._snapshot

    @property
    def dataset(self) -> tuple[Any, ...]:
        return self.snapshot()

    # Consumers

    def register_consumer(
        self,
        consumer_id: str,
        readiness: ReadinessSource,
        callback: ConsumerCallback,
    ) -> ConsumerRegistration:
        """Register a renderer or analyzer to be activated lazily."""
        return self.activation.register(consumer_id, readiness, callback)

    def is_activated(self, consumer_id: str) -> bool:
        return self.activation.is_activated(consumer_id)

    def _notify_consumers(self) -> int:
        snapshot = self.snapshot()
        refreshed = self.activation.refresh(snapshot)
        self.logger.debug("Consumers refreshed", consumers=refreshed, records=len(snapshot))
        return refreshed

    # Session lifecycle

    async def start(self) -> tuple[Any, ...]:
        """
        Load the dataset, from cache when allowed and fresh, else from the API.

        Returns:
            Dataset snapshot at the end of the load
        """
        consent = self.consent.is_cache_allowed()

        if consent == ConsentState.GRANTED:
            entry = await asyncio.to_thread(self.cache.get, self.cache_key)
            if entry is not None and entry.payload:
                self._load_cached(entry)
                return self.snapshot()
        else:
            self.logger.info("Cache not consulted", consent=consent.value)
            if consent == ConsentState.DENIED:
                # Entry may survive from a session that had consent
                await asyncio.to_thread(self.cache.delete, self.cache_key)
                self.status.hide_cache_status()

        return await self._fetch()

    async def refresh(self) -> tuple[Any, ...]:
        """Discard the cache and fetch everything again."""
        self.logger.info("Refresh requested")
        await asyncio.to_thread(self.cache.delete, self.cache_key)
        self.status.hide_cache_status()
        return await self._fetch()

    def cancel(self) -> None:
        """Cancel the fetch in progress, keeping what has been loaded."""
        self.fetcher.cancel()

    async def clear_cache(self) -> bool:
        """Maintenance action: remove the cached dataset."""
        self.status.hide_cache_status()
        return await asyncio.to_thread(self.cache.delete, self.cache_key)

    def cache_status(self) -> Optional[CacheMetadata]:
        """Cached dataset summary without loading it."""
        return self.cache.metadata(self.cache_key)

    async def close(self) -> None:
        self.cancel()
        self.scheduler.cancel()
        self.activation.disconnect_all()
        self._unsubscribe_consent()

        aclose = getattr(self.source, "aclose", None)
        if aclose is not None:
            await aclose()

    def _load_cached(self, entry: CacheEntry) -> None:
        self._generation += 1
        self._records = list(entry.payload)
        self._snapshot = ()
        self.data_source = "cache"

        self.scheduler.flush()
        self.status.hide_loading()
        self.status.show_success(f"Loaded {entry.item_count:,} artworks from cache")
        self.status.show_cache_status(entry.created_at, entry.item_count)

    async def _fetch(self) -> tuple[Any, ...]:
        self._generation += 1
        generation = self._generation
        records: list[Any] = []
        self._records = records
        self._snapshot = ()
        self.data_source = "network"
        self.last_error = None
        self._report_progress.reset()
        self.status.show_loading()

        def on_progress(fetched: int, page_records: list[Any]) -> None:
            # A superseded fetch may still deliver its last page
            if generation != self._generation:
                return
            records.extend(page_records)
            self._report_progress(fetched)
            self.scheduler.trigger()

        try:
            result = await self.fetcher.fetch_all(self.normalizer, on_progress=on_progress)
        except TerminalFetchError as e:
            if generation == self._generation:
                self.last_error = e
                self.status.show_error(
                    f"Failed to load data: {e}. Please try refreshing the page."
                )
                self.scheduler.flush()
            return self.snapshot()
        finally:
            if generation == self._generation:
                self.status.hide_loading()

        if generation != self._generation:
            return self.snapshot()

        self.last_result = result
        self.scheduler.flush()

        if result.completed:
            self.status.show_success(f"Successfully loaded {len(records):,} artworks")
            await self._store(records)
        else:
            self.logger.info("Load cancelled, keeping partial dataset", records=len(records))

        return self.snapshot()

    async def _store(self, records: list[Any]) -> None:
        consent = self.consent.is_cache_allowed()
        if consent != ConsentState.GRANTED:
            self.logger.info("Cache write skipped", consent=consent.value)
            return

        await asyncio.to_thread(self.cache.put, self.cache_key, list(records))

    def _on_consent_change(self, old_state: ConsentState, new_state: ConsentState) -> None:
        if new_state != ConsentState.DENIED:
            return

        self.logger.info("Storage consent revoked, deleting cached dataset",
                         previous=old_state.value)
        self.cache.delete(self.cache_key)
        self.status.hide_cache_status()
