"""Persistent dataset cache with TTL and schema-version invalidation."""

import sqlite3
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterable, Optional

import orjson

from ..errors import StorageError
from ..logging.config import get_cache_logger
from ..utils.time import Clock, now_ms

RecordFactory = Callable[[Any], Any]


@dataclass(frozen=True)
class CacheEntry:
    """Persisted dataset snapshot."""
    key: str
    payload: tuple[Any, ...]
    created_at: int
    schema_version: int

    @property
    def item_count(self) -> int:
        return len(self.payload)


@dataclass(frozen=True)
class CacheMetadata:
    """Entry summary read without deserializing the payload."""
    created_at: int
    item_count: int
    expired: bool
    schema_version: int


class CacheStore:
    """SQLite-based dataset cache.

    Reads return None for anything missing, expired or written under another
    schema version, deleting stale rows on the way. Storage failures are
    logged and absorbed so callers behave as if no cache existed.
    """

    def __init__(
        self,
        db_path: str = "smk_cache.db",
        ttl_ms: int = 7 * 24 * 60 * 60 * 1000,
        schema_version: int = 1,
        clock: Optional[Clock] = None,
        record_factory: Optional[RecordFactory] = None,
    ):
        self.db_path = Path(db_path)
        self.ttl_ms = ttl_ms
        self.schema_version = schema_version
        self.clock = clock or now_ms
        self.record_factory = record_factory
        self.logger = get_cache_logger(__name__)
        self._lock = threading.Lock()
        # Database file is created by the first put
        self._initialized = False

    def _init_database(self) -> None:
        """Initialize database schema."""
        conn = sqlite3.connect(self.db_path, timeout=30.0)
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS cache_entries (
                    key TEXT PRIMARY KEY,
                    payload BLOB NOT NULL,
                    created_at INTEGER NOT NULL,
                    schema_version INTEGER NOT NULL,
                    item_count INTEGER NOT NULL
                )
            """)
            conn.commit()
        finally:
            conn.close()
        self._initialized = True

    @contextmanager
    def _get_connection(self):
        """Get database connection, translating engine failures to StorageError."""
        conn = None
        try:
            if not self._initialized:
                self._init_database()
            conn = sqlite3.connect(self.db_path, timeout=30.0)
            conn.row_factory = sqlite3.Row
            yield conn
        except (sqlite3.Error, OSError) as e:
            if conn:
                conn.rollback()
            raise StorageError(f"Database error: {e}", key=None) from e
        finally:
            if conn:
                conn.close()

    @property
    def exists(self) -> bool:
        """True once the database file has been created."""
        return self._initialized or self.db_path.exists()

    def is_expired(self, created_at: int) -> bool:
        """True once the entry is at least ttl_ms old."""
        return self.clock() - created_at >= self.ttl_ms

    def get(self, key: str) -> Optional[CacheEntry]:
        """
        Read a valid entry.

        Args:
            key: Cache key

        Returns:
            CacheEntry if present, current-schema and unexpired; None otherwise
        """
        if not self.exists:
            return None

        try:
            with self._get_connection() as conn:
                row = conn.execute("""
                    SELECT payload, created_at, schema_version
                    FROM cache_entries WHERE key = ?
                """, (key,)).fetchone()
        except StorageError as e:
            self.logger.warning("Error reading cache", key=key, error=str(e))
            return None

        if row is None:
            self.logger.debug("Cache miss", key=key)
            return None

        if row["schema_version"] != self.schema_version:
            self.logger.info(
                "Cache entry written under another schema version, discarding",
                key=key,
                stored_version=row["schema_version"],
                expected_version=self.schema_version
            )
            self.delete(key)
            return None

        if self.is_expired(row["created_at"]):
            self.logger.info("Cache expired, discarding", key=key, created_at=row["created_at"])
            self.delete(key)
            return None

        try:
            payload = self._decode(row["payload"])
        except (orjson.JSONDecodeError, TypeError, ValueError, KeyError) as e:
            self.logger.warning("Corrupt cache payload, discarding", key=key, error=str(e))
            self.delete(key)
            return None

        self.logger.info("Using cached data", key=key, created_at=row["created_at"],
                         item_count=len(payload))
        return CacheEntry(
            key=key,
            payload=payload,
            created_at=row["created_at"],
            schema_version=row["schema_version"]
        )

    def put(self, key: str, payload: Iterable[Any]) -> bool:
        """
        Store a dataset snapshot, replacing any previous entry.

        Args:
            key: Cache key
            payload: Records to persist

        Returns:
            True if stored, False if the write was absorbed as a failure
        """
        records = list(payload)

        with self._lock:
            try:
                blob = orjson.dumps(records)
                with self._get_connection() as conn:
                    conn.execute("""
                        INSERT OR REPLACE INTO cache_entries (
                            key, payload, created_at, schema_version, item_count
                        ) VALUES (?, ?, ?, ?, ?)
                    """, (key, blob, int(self.clock()), self.schema_version, len(records)))
                    conn.commit()
            except (StorageError, orjson.JSONEncodeError, TypeError) as e:
                self.logger.warning("Error saving to cache", key=key, error=str(e))
                return False

        self.logger.info("Data cached successfully", key=key, item_count=len(records))
        return True

    def delete(self, key: str) -> bool:
        """Remove an entry. Deleting a missing key is not an error."""
        if not self.exists:
            return True

        with self._lock:
            try:
                with self._get_connection() as conn:
                    conn.execute("DELETE FROM cache_entries WHERE key = ?", (key,))
                    conn.commit()
                return True
            except StorageError as e:
                self.logger.warning("Error deleting cache entry", key=key, error=str(e))
                return False

    def metadata(self, key: str) -> Optional[CacheMetadata]:
        """Entry summary for status display; does not load the payload."""
        if not self.exists:
            return None

        try:
            with self._get_connection() as conn:
                row = conn.execute("""
                    SELECT created_at, item_count, schema_version
                    FROM cache_entries WHERE key = ?
                """, (key,)).fetchone()
        except StorageError as e:
            self.logger.warning("Error reading cache metadata", key=key, error=str(e))
            return None

        if row is None:
            return None

        return CacheMetadata(
            created_at=row["created_at"],
            item_count=row["item_count"],
            expired=(self.is_expired(row["created_at"])
                     or row["schema_version"] != self.schema_version),
            schema_version=row["schema_version"]
        )

    def clear(self) -> int:
        """Remove every entry. Returns the number of rows deleted."""
        if not self.exists:
            return 0

        with self._lock:
            try:
                with self._get_connection() as conn:
                    cursor = conn.execute("DELETE FROM cache_entries")
                    conn.commit()
                    deleted_count = cursor.rowcount
            except StorageError as e:
                self.logger.warning("Error clearing cache", error=str(e))
                return 0

        self.logger.info("Cache cleared", deleted=deleted_count)
        return deleted_count

    def _decode(self, blob: bytes) -> tuple[Any, ...]:
        items = orjson.loads(blob)
        if not isinstance(items, list):
            raise ValueError("Cached payload is not a list")
        if self.record_factory is not None:
            return tuple(self.record_factory(item) for item in items)
        return tuple(items)
