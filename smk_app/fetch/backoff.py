"""Retry delay policy for page requests."""

from dataclasses import dataclass
from typing import Optional

from ..config.defaults import FetchParams


@dataclass(frozen=True)
class BackoffPolicy:
    """Delay before retry number `attempt` (1-based).

    With multiplier 1.0 the delay grows linearly (base, 2*base, 3*base...);
    a multiplier above 1.0 gives exponential growth (base, base*m, base*m^2...).
    """
    base_ms: float = 1000
    multiplier: float = 1.0
    max_ms: Optional[float] = None

    @classmethod
    def from_config(cls, params: FetchParams) -> "BackoffPolicy":
        return cls(base_ms=params.backoff_base_ms, multiplier=params.backoff_multiplier)

    def delay_ms(self, attempt: int) -> float:
        if attempt <= 0:
            return 0.0

        if self.multiplier == 1.0:
            delay = self.base_ms * attempt
        else:
            delay = self.base_ms * self.multiplier ** (attempt - 1)

        if self.max_ms is not None:
            delay = min(delay, self.max_ms)
        return delay

    def delay_seconds(self, attempt: int) -> float:
        return self.delay_ms(attempt) / 1000
