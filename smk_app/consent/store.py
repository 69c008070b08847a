"""File-backed persistence of the user's storage consent choice."""

from pathlib import Path
from typing import Optional

import orjson

from ..errors import StorageError
from ..logging.config import get_cache_logger
from ..utils.time import Clock, now_ms
from .models import ConsentState

_ACCEPTED = "accepted"
_DECLINED = "declined"


class ConsentStore:
    """Persists accept/decline with its own expiry, like a consent cookie.

    A missing or expired record reads as UNDECIDED. Unreadable or unwritable
    storage raises StorageError for the gate to absorb.
    """

    def __init__(self, path: str = "smk_storage_consent.json", expiry_days: int = 365,
                 clock: Optional[Clock] = None):
        self.path = Path(path)
        self.expiry_ms = expiry_days * 24 * 60 * 60 * 1000
        self.clock = clock or now_ms
        self.logger = get_cache_logger(__name__)

    def load(self) -> ConsentState:
        """Read the persisted choice."""
        if not self.path.exists():
            return ConsentState.UNDECIDED

        try:
            record = orjson.loads(self.path.read_bytes())
            value = record["value"]
            expires_at = record["expires_at"]
        except (OSError, orjson.JSONDecodeError, KeyError, TypeError) as e:
            raise StorageError(f"Unreadable consent record: {e}", operation="load",
                               key=str(self.path)) from e

        if self.clock() >= expires_at:
            self.logger.info("Consent record expired", expires_at=expires_at)
            return ConsentState.UNDECIDED

        if value == _ACCEPTED:
            return ConsentState.GRANTED
        if value == _DECLINED:
            return ConsentState.DENIED
        return ConsentState.UNDECIDED

    def save(self, accepted: bool) -> None:
        """Persist the user's choice with a fresh expiry."""
        record = {
            "value": _ACCEPTED if accepted else _DECLINED,
            "expires_at": int(self.clock() + self.expiry_ms),
        }
        try:
            self.path.write_bytes(orjson.dumps(record))
        except OSError as e:
            raise StorageError(f"Could not save consent: {e}", operation="save",
                               key=str(self.path)) from e

    def clear(self) -> None:
        """Forget the choice so the user is asked again."""
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Could not clear consent: {e}", operation="clear",
                               key=str(self.path)) from e
