"""
Update scheduling: debounce and throttle for "new data" notifications.

Debouncer coalesces bursts of trigger() calls into one callback per quiet
window. The callback takes no arguments and reads the latest state itself
when it fires, so nothing is queued between triggers.
"""

import asyncio
import time
from typing import Any, Callable, Optional

from ..logging.config import get_logger

logger = get_logger(__name__)


class Debouncer:
    """At most one pending callback, re-armed by every trigger()."""

    def __init__(self, callback: Callable[[], Any], wait_ms: float = 300) -> None:
        self.callback = callback
        self.wait_ms = wait_ms
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self) -> None:
        """Restart the quiet window. Must be called from a running event loop."""
        loop = asyncio.get_running_loop()
        if self._handle is not None:
            self._handle.cancel()
        self._handle = loop.call_later(self.wait_ms / 1000, self._fire)

    def flush(self) -> Any:
        """Drop any pending timer and invoke the callback now."""
        self.cancel()
        return self.callback()

    def cancel(self) -> None:
        """Drop any pending timer without invoking the callback."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        try:
            self.callback()
        except Exception:
            logger.exception("Debounced callback failed")


def schedule(callback: Callable[[], Any], wait_ms: float = 300) -> Callable[[], None]:
    """Debounce callback and return its trigger function."""
    return Debouncer(callback, wait_ms).trigger


class Throttle:
    """Invoke callback at most once per wait_ms; extra calls are dropped."""

    def __init__(self, callback: Callable[..., Any], wait_ms: float,
                 clock: Optional[Callable[[], float]] = None) -> None:
        self.callback = callback
        self.wait_ms = wait_ms
        self.clock = clock or time.monotonic
        self._last: Optional[float] = None

    def __call__(self, *args: Any, **kwargs: Any) -> bool:
        now = self.clock()
        if self._last is not None and (now - self._last) * 1000 < self.wait_ms:
            return False

        self._last = now
        self.callback(*args, **kwargs)
        return True

    def reset(self) -> None:
        self._last = None
