"""Tests for the randomuser.me source: URL builder and error mapping."""

from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from src.core.config import ApiConfig
from src.core.errors import (
    DecodeFailure,
    EmptyResponse,
    FetchError,
    HTTPStatusFailure,
    InvalidRequest,
    TransportFailure,
)
from src.sources.base import UserSource
from src.sources.randomuser import RandomUserSource, build_url


def _query(url: str) -> dict[str, list[str]]:
    return parse_qs(urlparse(url).query)


def _source(handler) -> RandomUserSource:  # type: ignore[no-untyped-def]
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RandomUserSource(ApiConfig(), client=client)


# ---------------------------------------------------------------------------
# build_url
# ---------------------------------------------------------------------------


class TestBuildUrl:
    def test_base_and_path(self) -> None:
        url = build_url(ApiConfig(), page=1, page_size=25)
        parsed = urlparse(url)
        assert parsed.scheme == "https"
        assert parsed.netloc == "randomuser.me"
        assert parsed.path == "/api/"

    def test_page_params(self) -> None:
        q = _query(build_url(ApiConfig(), page=3, page_size=25))
        assert q["results"] == ["25"]
        assert q["page"] == ["3"]
        assert "seed" not in q

    def test_seed_included(self) -> None:
        q = _query(build_url(ApiConfig(), page=2, page_size=25, seed="abc"))
        assert q["seed"] == ["abc"]

    def test_empty_seed_omitted(self) -> None:
        q = _query(build_url(ApiConfig(), page=2, page_size=25, seed=""))
        assert "seed" not in q

    def test_seed_is_encoded(self) -> None:
        url = build_url(ApiConfig(), page=1, page_size=5, seed="a b&c")
        assert _query(url)["seed"] == ["a b&c"]

    def test_slashes_normalized(self) -> None:
        config = ApiConfig(base_url="http://localhost:8000/", path="api/")
        parsed = urlparse(build_url(config, page=1, page_size=5))
        assert parsed.netloc == "localhost:8000"
        assert parsed.path == "/api/"

    def test_non_positive_inputs_rejected(self) -> None:
        with pytest.raises(InvalidRequest):
            build_url(ApiConfig(), page=0, page_size=25)
        with pytest.raises(InvalidRequest):
            build_url(ApiConfig(), page=1, page_size=0)

    def test_invalid_request_is_fetch_error(self) -> None:
        with pytest.raises(FetchError):
            build_url(ApiConfig(), page=-1, page_size=25)


# ---------------------------------------------------------------------------
# fetch_page
# ---------------------------------------------------------------------------


class TestFetchPage:
    def test_is_user_source(self) -> None:
        source = RandomUserSource(ApiConfig(), client=httpx.AsyncClient())
        assert isinstance(source, UserSource)
        assert source.source_id == "randomuser"

    async def test_success(self, sample_page_json: str) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, content=sample_page_json.encode())

        async with _source(handler) as source:
            page = await source.fetch_page(1, 25, seed="abc")

        assert len(page.results) == 2
        assert page.seed == "abc"
        assert len(seen) == 1
        assert seen[0].method == "GET"
        assert seen[0].url.params["seed"] == "abc"
        assert seen[0].url.params["results"] == "25"
        assert seen[0].headers["accept"] == "application/json"

    async def test_transport_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with _source(handler) as source:
            with pytest.raises(TransportFailure) as exc_info:
                await source.fetch_page(1, 25)
        assert isinstance(exc_info.value.cause, httpx.ConnectError)

    async def test_timeout_is_transport_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        async with _source(handler) as source:
            with pytest.raises(TransportFailure):
                await source.fetch_page(1, 25)

    @pytest.mark.parametrize("status", [301, 404, 500, 503])
    async def test_http_status_failure(self, status: int) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status, content=b'{"error": "nope"}')

        async with _source(handler) as source:
            with pytest.raises(HTTPStatusFailure) as exc_info:
                await source.fetch_page(1, 25)
        assert exc_info.value.status_code == status

    async def test_empty_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"")

        async with _source(handler) as source:
            with pytest.raises(EmptyResponse):
                await source.fetch_page(1, 25)

    async def test_invalid_json(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"<html>oops</html>")

        async with _source(handler) as source:
            with pytest.raises(DecodeFailure):
                await source.fetch_page(1, 25)

    async def test_wrong_shape(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"results": [{"email": "x"}], "info": {}})

        async with _source(handler) as source:
            with pytest.raises(DecodeFailure):
                await source.fetch_page(1, 25)

    async def test_corrupt_content_encoding_is_decode_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                headers={"Content-Encoding": "gzip"},
                content=b"this is not gzip data",
            )

        async with _source(handler) as source:
            with pytest.raises(DecodeFailure) as exc_info:
                await source.fetch_page(1, 25)
        assert isinstance(exc_info.value.cause, httpx.DecodingError)

    async def test_too_many_redirects_is_transport_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.TooManyRedirects("redirect loop", request=request)

        async with _source(handler) as source:
            with pytest.raises(TransportFailure) as exc_info:
                await source.fetch_page(1, 25)
        assert isinstance(exc_info.value.cause, httpx.TooManyRedirects)

    async def test_injected_client_not_closed(self, sample_page_json: str) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=sample_page_json.encode())

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        async with RandomUserSource(ApiConfig(), client=client):
            pass
        assert client.is_closed is False
        await client.aclose()
