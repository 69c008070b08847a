"""Tests for consent persistence and the consent gate."""

import pytest

from smk_app.consent import ConsentGate, ConsentState, ConsentStore
from smk_app.errors import StorageError

DAY_MS = 24 * 60 * 60 * 1000


class TestConsentStore:
    """Test ConsentStore persistence."""

    @pytest.fixture
    def store(self, tmp_path, clock):
        return ConsentStore(str(tmp_path / "consent.json"), expiry_days=365, clock=clock)

    def test_no_record_is_undecided(self, store):
        assert store.load() == ConsentState.UNDECIDED

    def test_accept_and_decline(self, store):
        store.save(True)
        assert store.load() == ConsentState.GRANTED

        store.save(False)
        assert store.load() == ConsentState.DENIED

    def test_choice_expires(self, store, clock):
        """The choice lapses after its expiry."""
        store.save(True)

        clock.advance(364 * DAY_MS)
        assert store.load() == ConsentState.GRANTED

        clock.advance(2 * DAY_MS)
        assert store.load() == ConsentState.UNDECIDED

    def test_clear(self, store):
        store.save(False)
        store.clear()
        store.clear()

        assert store.load() == ConsentState.UNDECIDED

    def test_corrupt_record_raises_storage_error(self, store):
        store.path.write_text("garbage")

        with pytest.raises(StorageError):
            store.load()

    def test_unwritable_location(self, tmp_path, clock):
        store = ConsentStore(str(tmp_path / "nope" / "consent.json"), clock=clock)

        with pytest.raises(StorageError) as exc_info:
            store.save(True)
        assert exc_info.value.operation == "save"


class TestConsentGate:
    """Test ConsentGate transitions and listeners."""

    @pytest.fixture
    def store(self, tmp_path, clock):
        return ConsentStore(str(tmp_path / "consent.json"), clock=clock)

    def test_initial_state_from_store(self, store):
        store.save(True)

        assert ConsentGate(store).is_cache_allowed() == ConsentState.GRANTED

    def test_undecided_by_default(self, store):
        assert ConsentGate(store).is_cache_allowed() == ConsentState.UNDECIDED

    def test_accept_decline_notify_listeners(self, store):
        gate = ConsentGate(store)
        seen = []
        gate.subscribe(lambda old, new: seen.append((old, new)))

        gate.accept()
        gate.accept()
        gate.decline()

        assert seen == [
            (ConsentState.UNDECIDED, ConsentState.GRANTED),
            (ConsentState.GRANTED, ConsentState.DENIED),
        ]
        assert store.load() == ConsentState.DENIED

    def test_external_revocation_detected(self, store):
        """A change made outside the gate is noticed on the next check."""
        store.save(True)
        gate = ConsentGate(store)
        seen = []
        gate.subscribe(lambda old, new: seen.append(new))

        store.save(False)

        assert gate.is_cache_allowed() == ConsentState.DENIED
        assert seen == [ConsentState.DENIED]

    def test_reset(self, store):
        gate = ConsentGate(store)
        gate.accept()
        gate.reset()

        assert gate.is_cache_allowed() == ConsentState.UNDECIDED
        assert not store.path.exists()

    def test_unsubscribe(self, store):
        gate = ConsentGate(store)
        seen = []
        unsubscribe = gate.subscribe(lambda old, new: seen.append(new))

        unsubscribe()
        gate.accept()

        assert seen == []

    def test_unpersistable_choice_holds_for_session(self, tmp_path, clock):
        """If the choice cannot be saved it still applies to this process."""
        store = ConsentStore(str(tmp_path / "nope" / "consent.json"), clock=clock)
        gate = ConsentGate(store)

        gate.decline()

        assert gate.is_cache_allowed() == ConsentState.DENIED

    def test_unreadable_store_keeps_last_state(self, store):
        gate = ConsentGate(store)
        gate.accept()

        store.path.write_text("garbage")

        assert gate.is_cache_allowed() == ConsentState.GRANTED
