"""
Page sources for the paginated fetcher.

A page source performs exactly one request for one page and classifies
failures: network errors and non-2xx responses become TransportError,
undecodable bodies and envelopes without an items array become
ProtocolError. Retrying is the fetcher's job, not the source's.
"""

from typing import Any, Optional, Protocol, runtime_checkable

import httpx
import orjson

from ..config.defaults import ApiParams
from ..errors import ProtocolError, TransportError
from ..logging.config import get_fetch_logger

logger = get_fetch_logger(__name__)


@runtime_checkable
class PageSource(Protocol):
    """Anything that can return the raw items of one page."""

    async def fetch_page(self, offset: int, limit: int) -> list[dict[str, Any]]:
        """
        Request one page.

        Args:
            offset: Index of the first item, a multiple of the page size
            limit: Page size

        Returns:
            Raw items of the page (possibly fewer than limit, possibly empty)

        Raises:
            TransportError: Network failure or non-2xx response
            ProtocolError: Malformed response body
        """
        ...


class HttpPageSource:
    """Search API page source over httpx.AsyncClient."""

    def __init__(
        self,
        base_url: str,
        keys: str = "*",
        language: str = "en",
        filters: Optional[dict[str, Any]] = None,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url
        self.keys = keys
        self.language = language
        self.filters = filters or {}
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None

    @classmethod
    def from_config(cls, params: ApiParams,
                    filters: Optional[dict[str, Any]] = None) -> "HttpPageSource":
        """Build a source from the api section of the configuration."""
        return cls(
            base_url=params.base_url,
            keys=params.keys,
            language=params.language,
            filters=filters,
            timeout=params.timeout_seconds,
        )

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    def build_params(self, offset: int, limit: int) -> dict[str, Any]:
        """Query parameters for one page request."""
        return {
            "keys": self.keys,
            "rows": limit,
            "offset": offset,
            "lang": self.language,
            **self.filters,
        }

    async def fetch_page(self, offset: int, limit: int) -> list[dict[str, Any]]:
        params = self.build_params(offset, limit)

        try:
            response = await self.client.get(self.base_url, params=params)
        except httpx.HTTPError as e:
            raise TransportError(f"Network error: {e}", offset=offset) from e

        if not response.is_success:
            raise TransportError(
                f"HTTP {response.status_code}: {response.reason_phrase}",
                status_code=response.status_code,
                offset=offset,
            )

        try:
            body = orjson.loads(response.content)
        except orjson.JSONDecodeError as e:
            raise ProtocolError(
                f"Invalid JSON in API response: {e}",
                raw_snippet=response.text[:200],
                offset=offset,
            ) from e

        items = body.get("items") if isinstance(body, dict) else None
        if not isinstance(items, list):
            raise ProtocolError(
                "Invalid API response format",
                raw_snippet=response.text[:200],
                offset=offset,
            )

        logger.debug("Page response received", offset=offset, items=len(items))
        return items

    async def aclose(self) -> None:
        """Close the HTTP client if this source created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
