"""
User-visible session status: loading indicator, messages and cache status.

Pure state for whatever front end renders it. Error notices stay until
dismissed; the loading indicator is cleared at the end of every attempt.
"""

import itertools
from dataclasses import dataclass
from typing import Optional

from .logging.config import get_logger
from .utils.time import format_age, now_ms, to_datetime

logger = get_logger(__name__)


@dataclass
class Notice:
    """A message shown to the user."""
    id: int
    level: str
    message: str
    dismissed: bool = False


class StatusBoard:
    """Tracks what the user should currently see about the data load."""

    def __init__(self) -> None:
        self.loading = False
        self.loading_text = ""
        self.processed = 0
        self.success_message: Optional[str] = None
        self.cache_info: Optional[str] = None
        self.notices: list[Notice] = []
        self._ids = itertools.count(1)

    def show_loading(self) -> None:
        self.loading = True
        self.processed = 0
        self.success_message = None
        self.loading_text = "Loading SMK data..."

    def update_loading(self, count: int) -> None:
        self.processed = count
        self.loading_text = f"Loading SMK data... {count} items processed"

    def hide_loading(self) -> None:
        self.loading = False

    def show_success(self, message: str) -> None:
        self.success_message = message
        logger.info("Status success", message=message)

    def show_error(self, message: str) -> Notice:
        """Add a dismissible error notice."""
        notice = Notice(id=next(self._ids), level="error", message=message)
        self.notices.append(notice)
        logger.error("Status error", message=message, notice_id=notice.id)
        return notice

    def dismiss(self, notice_id: int) -> bool:
        for notice in self.notices:
            if notice.id == notice_id and not notice.dismissed:
                notice.dismissed = True
                return True
        return False

    @property
    def active_errors(self) -> list[Notice]:
        return [n for n in self.notices if n.level == "error" and not n.dismissed]

    def show_cache_status(self, created_at_ms: int, item_count: int,
                          current_ms: Optional[int] = None) -> str:
        """Describe the cached dataset, e.g. 'Using cached data from 2025-01-03 (yesterday) • 1,234 artworks'."""
        if current_ms is None:
            current_ms = now_ms()

        date = to_datetime(created_at_ms).date().isoformat()
        age = format_age(created_at_ms, current_ms)
        self.cache_info = f"Using cached data from {date} ({age}) • {item_count:,} artworks"
        return self.cache_info

    def hide_cache_status(self) -> None:
        self.cache_info = None
