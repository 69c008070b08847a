"""
Consent gate controlling whether the dataset cache may be used.

The gate is consulted on every cache decision rather than once per
session: users can revoke consent after data has loaded, and listeners
are told about every transition so the cache can be purged immediately.
"""

from typing import Callable, Optional

from ..errors import StorageError
from ..logging.config import get_cache_logger
from .models import ConsentState
from .store import ConsentStore

ConsentListener = Callable[[ConsentState, ConsentState], None]


class ConsentGate:
    """Tri-state storage permission backed by a ConsentStore."""

    def __init__(self, store: Optional[ConsentStore] = None):
        self.store = store or ConsentStore()
        self.logger = get_cache_logger(__name__)
        self._listeners: list[ConsentListener] = []
        self._state = ConsentState.UNDECIDED
        # Set when a choice could not be persisted; it then holds for the process lifetime
        self._pinned = False
        self._state = self._read()

    def is_cache_allowed(self) -> ConsentState:
        """Current consent, re-read from storage so external changes are seen."""
        if not self._pinned:
            self._transition(self._read(), source="storage")
        return self._state

    def accept(self) -> None:
        """User accepted local storage."""
        self._record(True)

    def decline(self) -> None:
        """User declined local storage."""
        self._record(False)

    def reset(self) -> None:
        """Forget the user's choice (back to undecided)."""
        try:
            self.store.clear()
            self._pinned = False
        except StorageError as e:
            self.logger.warning("Failed to clear consent, keeping reset for this session",
                                error=str(e))
            self._pinned = True
        self._transition(ConsentState.UNDECIDED, source="user")

    def subscribe(self, listener: ConsentListener) -> Callable[[], None]:
        """
        Register a transition listener.

        Args:
            listener: Called with (old_state, new_state) on every change

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _record(self, accepted: bool) -> None:
        new_state = ConsentState.GRANTED if accepted else ConsentState.DENIED
        try:
            self.store.save(accepted)
            self._pinned = False
        except StorageError as e:
            self.logger.warning("Failed to persist consent, keeping choice for this session",
                                choice=new_state.value, error=str(e))
            self._pinned = True
        self._transition(new_state, source="user")

    def _read(self) -> ConsentState:
        try:
            return self.store.load()
        except StorageError as e:
            self.logger.warning("Failed to read consent, keeping last known state",
                                state=self._state.value, error=str(e))
            return self._state

    def _transition(self, new_state: ConsentState, source: str) -> None:
        old_state = self._state
        if new_state == old_state:
            return

        self._state = new_state
        self.logger.info("Consent changed", from_state=old_state.value,
                         to_state=new_state.value, source=source)

        for listener in list(self._listeners):
            listener(old_state, new_state)
