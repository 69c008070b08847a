"""Pytest configuration and shared fixtures."""

import asyncio
import dataclasses
from typing import Any, Optional

import pytest

from smk_app.config.defaults import get_default_config


class FakeClock:
    """Controllable epoch-millisecond clock."""

    def __init__(self, now: int = 0) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakePageSource:
    """Scripted page source.

    pages[i] is returned for offset i * limit; offsets past the end return [].
    failures[i] is a list of exceptions raised, one per attempt, before page i
    succeeds. hang_at makes the first request for that page block until cancelled.
    """

    def __init__(
        self,
        pages: list[list[Any]],
        failures: Optional[dict[int, list[Exception]]] = None,
        hang_at: Optional[int] = None,
        delay: float = 0.0,
    ) -> None:
        self.pages = pages
        self.failures = {k: list(v) for k, v in (failures or {}).items()}
        self.hang_at = hang_at
        self.delay = delay
        self.requests: list[int] = []
        self.cancelled_requests = 0

    async def fetch_page(self, offset: int, limit: int) -> list[Any]:
        self.requests.append(offset)
        index = offset // limit

        if self.hang_at == index:
            self.hang_at = None
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                self.cancelled_requests += 1
                raise

        if self.delay:
            await asyncio.sleep(self.delay)

        pending = self.failures.get(index)
        if pending:
            raise pending.pop(0)

        if index >= len(self.pages):
            return []
        return list(self.pages[index])


async def wait_for_requests(source: FakePageSource, count: int) -> None:
    """Yield to the loop until the source has seen count requests."""
    while len(source.requests) < count:
        await asyncio.sleep(0)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(now=1_700_000_000_000)


@pytest.fixture
def fast_config():
    """Default configuration with tiny pages, no backoff and a short debounce window."""
    config = get_default_config()
    return dataclasses.replace(
        config,
        fetch=dataclasses.replace(config.fetch, page_size=2, backoff_base_ms=0),
        scheduler=dataclasses.replace(config.scheduler, debounce_ms=20, progress_throttle_ms=0),
    )


@pytest.fixture
def sample_api_item() -> dict[str, Any]:
    """Raw SMK search API item."""
    return {
        "object_number": "KMS1",
        "production": [{
            "creator": "Anna Ancher",
            "creator_gender": "FEMALE",
            "creator_nationality": "dansk",
        }],
        "object_names": [{"name": "maleri"}],
        "techniques": ["oliemaleri"],
        "materials": ["lærred"],
        "acquisition_date": "1915-01-01T00:00:00Z",
        "production_date": [{"start": "1900-01-01T00:00:00.000Z"}],
        "exhibitions": [{"exhibition": "A"}, {"exhibition": "B"}],
        "on_display": True,
        "credit_line": "Gave fra ...",
        "content_person_full": [{"full_name": "Michael Ancher", "gender": "male"}],
    }
