"""randomuser.me source: URL builder plus an httpx-backed page fetcher."""

import logging
from types import TracebackType

import httpx
from pydantic import ValidationError

from src.core.config import ApiConfig
from src.core.errors import (
    DecodeFailure,
    EmptyResponse,
    HTTPStatusFailure,
    InvalidRequest,
    TransportFailure,
)
from src.core.schemas import Page
from src.sources.base import UserSource

logger = logging.getLogger(__name__)


def build_url(config: ApiConfig, page: int, page_size: int, seed: str | None = None) -> str:
    """Build the page request URL.

    Args:
        config: API endpoint configuration.
        page: 1-based page index.
        page_size: Number of users per page (``results`` parameter).
        seed: Optional seed; omitted from the query when None or empty.

    Raises:
        InvalidRequest: If the inputs cannot form a valid URL.
    """
    if page < 1 or page_size < 1:
        msg = f"page and page_size must be positive, got page={page} page_size={page_size}"
        raise InvalidRequest(msg)

    base = config.base_url.rstrip("/")
    path = config.path if config.path.startswith("/") else f"/{config.path}"

    params: dict[str, str] = {
        "results": str(page_size),
        "page": str(page),
    }
    if seed:
        params["seed"] = seed

    try:
        url = httpx.URL(f"{base}{path}", params=params)
    except httpx.InvalidURL as e:
        msg = f"Cannot build request URL from '{base}{path}': {e}"
        raise InvalidRequest(msg) from e
    if not url.host:
        msg = f"Request URL has no host: {url}"
        raise InvalidRequest(msg)
    return str(url)


class RandomUserSource(UserSource):
    """Fetches pages from the randomuser.me API.

    An httpx client may be injected (tests pass one with a MockTransport);
    otherwise the source owns its client and closes it on ``aclose``.

    Usage::

        async with RandomUserSource(settings.api) as source:
            page = await source.fetch_page(1, 25)
    """

    def __init__(self, config: ApiConfig, client: httpx.AsyncClient | None = None) -> None:
        self._config = config
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=config.timeout_s,
            headers=config.default_headers,
        )

    @property
    def source_id(self) -> str:
        return "randomuser"

    async def fetch_page(self, page: int, page_size: int, seed: str | None = None) -> Page:
        url = build_url(self._config, page, page_size, seed)
        logger.debug("GET %s", url)

        try:
            response = await self._client.get(url, headers=self._config.default_headers)
        except httpx.DecodingError as e:
            logger.warning("Page %d body could not be decoded: %s", page, e)
            raise DecodeFailure(e) from e
        except httpx.RequestError as e:
            logger.warning("Transport failure fetching page %d: %s", page, e)
            raise TransportFailure(e) from e

        if not 200 <= response.status_code <= 299:
            logger.warning("Page %d returned HTTP %d", page, response.status_code)
            raise HTTPStatusFailure(response.status_code)

        if not response.content:
            raise EmptyResponse

        try:
            result = Page.model_validate_json(response.content)
        except ValidationError as e:
            logger.warning("Page %d could not be decoded: %d errors", page, e.error_count())
            raise DecodeFailure(e) from e

        logger.debug(
            "Page %d: %d users (seed=%s)", result.info.page, len(result.results), result.seed,
        )
        return result

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "RandomUserSource":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()
