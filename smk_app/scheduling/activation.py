"""
Lazy activation of data consumers.

Each consumer is registered under an id with a single-shot readiness
source. The first readiness signal activates the consumer: its callback runs
with the latest dataset snapshot and the source is detached. After that the
consumer only hears about data through refresh(), which re-invokes every
activated consumer whenever the dataset changes.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol

from ..config.defaults import ActivationParams
from ..logging.config import get_logger

Snapshot = tuple[Any, ...]
ConsumerCallback = Callable[[Snapshot], Any]


class ReadinessSource(Protocol):
    """Signal that a consumer is about to need its data."""

    def subscribe(self, listener: Callable[[], None]) -> None:
        ...

    def unsubscribe(self) -> None:
        ...


class ManualReadiness:
    """Readiness flipped by an explicit mark_ready() call.

    Subscribing after mark_ready() fires the listener immediately.
    """

    def __init__(self, ready: bool = False) -> None:
        self.ready = ready
        self._listener: Optional[Callable[[], None]] = None

    @property
    def subscribed(self) -> bool:
        return self._listener is not None

    def subscribe(self, listener: Callable[[], None]) -> None:
        self._listener = listener
        if self.ready:
            listener()

    def unsubscribe(self) -> None:
        self._listener = None

    def mark_ready(self) -> None:
        self.ready = True
        if self._listener is not None:
            self._listener()


class ThresholdReadiness(ManualReadiness):
    """Readiness from reported fractions (e.g. how much of a panel is visible).

    Fires once the reported fraction reaches threshold - margin, so the
    consumer starts slightly before it is strictly needed.
    """

    def __init__(self, threshold: float = 0.1, margin: float = 0.05) -> None:
        super().__init__()
        self.threshold = threshold
        self.margin = margin

    @classmethod
    def from_config(cls, params: ActivationParams) -> "ThresholdReadiness":
        return cls(threshold=params.threshold, margin=params.margin)

    @property
    def trigger_fraction(self) -> float:
        return max(0.0, self.threshold - self.margin)

    def report(self, fraction: float) -> bool:
        """Report the current readiness fraction. Returns True if now ready."""
        if not self.ready and fraction >= self.trigger_fraction:
            self.mark_ready()
        return self.ready


@dataclass
class ConsumerRegistration:
    """A consumer bound to its readiness source."""
    id: str
    readiness: ReadinessSource
    callback: ConsumerCallback
    activated: bool = False


class LazyActivationManager:
    """Registry of consumers keyed by id, each activated at most once."""

    def __init__(self, snapshot_provider: Optional[Callable[[], Snapshot]] = None) -> None:
        self.snapshot_provider = snapshot_provider or tuple
        self.logger = get_logger(__name__)
        self._registrations: dict[str, ConsumerRegistration] = {}

    def __contains__(self, consumer_id: str) -> bool:
        return consumer_id in self._registrations

    def __len__(self) -> int:
        return len(self._registrations)

    def register(
        self,
        consumer_id: str,
        readiness: ReadinessSource,
        callback: ConsumerCallback,
    ) -> ConsumerRegistration:
        """
        Register a consumer.

        Registering an id that is already activated keeps the existing
        registration. Re-registering a pending id replaces it.
        """
        existing = self._registrations.get(consumer_id)
        if existing is not None:
            if existing.activated:
                self.logger.debug("Consumer already activated, ignoring registration",
                                  consumer_id=consumer_id)
                return existing
            existing.readiness.unsubscribe()

        registration = ConsumerRegistration(
            id=consumer_id,
            readiness=readiness,
            callback=callback,
        )
        self._registrations[consumer_id] = registration
        self.logger.debug("Consumer registered", consumer_id=consumer_id)

        readiness.subscribe(lambda: self._on_ready(consumer_id))
        return registration

    def is_activated(self, consumer_id: str) -> bool:
        registration = self._registrations.get(consumer_id)
        return registration is not None and registration.activated

    def activated_ids(self) -> list[str]:
        return [reg.id for reg in self._registrations.values() if reg.activated]

    def force_activate(self, consumer_id: str) -> bool:
        """Activate now without waiting for readiness. Returns True if this call activated it."""
        registration = self._registrations.get(consumer_id)
        if registration is None:
            self.logger.warning("Cannot activate unknown consumer", consumer_id=consumer_id)
            return False

        if registration.activated:
            return False

        self._activate(registration, trigger="forced")
        return True

    def refresh(self, snapshot: Optional[Snapshot] = None) -> int:
        """
        Re-invoke every activated consumer with new data.

        Returns:
            Number of consumers invoked
        """
        if snapshot is None:
            snapshot = self.snapshot_provider()

        activated = [reg for reg in self._registrations.values() if reg.activated]
        for registration in activated:
            self._invoke(registration, snapshot)
        return len(activated)

    def disconnect_all(self) -> None:
        """Detach every pending readiness source."""
        for registration in self._registrations.values():
            if not registration.activated:
                registration.readiness.unsubscribe()

    def _on_ready(self, consumer_id: str) -> None:
        registration = self._registrations.get(consumer_id)
        if registration is None or registration.activated:
            return
        self._activate(registration, trigger="readiness")

    def _activate(self, registration: ConsumerRegistration, trigger: str) -> None:
        registration.readiness.unsubscribe()
        registration.activated = True
        self.logger.info("Consumer activated", consumer_id=registration.id, trigger=trigger)
        self._invoke(registration, self.snapshot_provider())

    def _invoke(self, registration: ConsumerRegistration, snapshot: Snapshot) -> None:
        try:
            registration.callback(snapshot)
        except Exception:
            self.logger.exception("Consumer callback failed", consumer_id=registration.id)
