"""Tests for the httpx-backed page source."""

import asyncio

import httpx
import orjson
import pytest

from smk_app.config.defaults import ApiParams
from smk_app.errors import ProtocolError, TransportError
from smk_app.fetch import BackoffPolicy, HttpPageSource, PageSource, PaginatedFetcher

BASE_URL = "https://api.example.test/art/search/"


def make_source(handler, **kwargs):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpPageSource(BASE_URL, client=client, **kwargs)


def json_response(body, status_code=200):
    return httpx.Response(status_code, content=orjson.dumps(body),
                          headers={"content-type": "application/json"})


class TestHttpPageSource:
    """Test request construction and response classification."""

    def test_is_page_source(self):
        assert isinstance(HttpPageSource(BASE_URL), PageSource)

    def test_request_parameters(self):
        seen = []

        def handler(request):
            seen.append(request.url.params)
            return json_response({"items": [{"id": 1}], "found": 1})

        source = make_source(handler, filters={"filters": "[has_image:true]"})
        items = asyncio.run(source.fetch_page(4000, 2000))

        assert items == [{"id": 1}]
        params = seen[0]
        assert params["keys"] == "*"
        assert params["rows"] == "2000"
        assert params["offset"] == "4000"
        assert params["lang"] == "en"
        assert params["filters"] == "[has_image:true]"

    def test_http_error_status(self):
        source = make_source(lambda request: httpx.Response(503))

        with pytest.raises(TransportError) as exc_info:
            asyncio.run(source.fetch_page(0, 10))

        assert exc_info.value.status_code == 503
        assert exc_info.value.offset == 0
        assert exc_info.value.recoverable is True

    def test_network_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        source = make_source(handler)

        with pytest.raises(TransportError) as exc_info:
            asyncio.run(source.fetch_page(0, 10))

        assert exc_info.value.status_code is None
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    def test_invalid_json(self):
        source = make_source(lambda request: httpx.Response(200, content=b"<html>oops"))

        with pytest.raises(ProtocolError) as exc_info:
            asyncio.run(source.fetch_page(0, 10))

        assert exc_info.value.raw_snippet.startswith("<html>")

    @pytest.mark.parametrize("body", [{"rows": []}, {"items": None}, {"items": {}}, [1, 2]])
    def test_missing_items_array(self, body):
        source = make_source(lambda request: json_response(body))

        with pytest.raises(ProtocolError, match="Invalid API response format"):
            asyncio.run(source.fetch_page(0, 10))

    def test_from_config(self):
        params = ApiParams(base_url=BASE_URL, language="da", timeout_seconds=5.0)
        source = HttpPageSource.from_config(params, filters={"filters": "x"})

        assert source.base_url == BASE_URL
        assert source.build_params(0, 10)["lang"] == "da"
        assert source.build_params(0, 10)["filters"] == "x"


class TestClientLifecycle:
    """Test client ownership."""

    def test_lazy_client_closed_by_source(self):
        source = HttpPageSource(BASE_URL)
        client = source.client

        assert source.client is client

        asyncio.run(source.aclose())
        assert client.is_closed
        assert source._client is None

    def test_injected_client_left_open(self):
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: json_response({"items": []})))
        source = HttpPageSource(BASE_URL, client=client)

        asyncio.run(source.aclose())

        assert not client.is_closed


class TestFetcherOverHttp:
    """Paginated fetch against a mocked search API."""

    def test_full_collection(self):
        collection = [{"id": i} for i in range(5)]
        attempts = {"count": 0}

        def handler(request):
            attempts["count"] += 1
            offset = int(request.url.params["offset"])
            rows = int(request.url.params["rows"])
            # Second page fails once
            if offset == 2 and attempts["count"] == 2:
                return httpx.Response(500)
            return json_response({"items": collection[offset:offset + rows]})

        source = make_source(handler)
        fetcher = PaginatedFetcher(source, page_size=2, backoff=BackoffPolicy(base_ms=0))

        result = asyncio.run(fetcher.fetch_all(lambda page: [item["id"] for item in page]))

        assert result.records == (0, 1, 2, 3, 4)
        assert attempts["count"] == 4
