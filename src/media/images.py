"""Avatar image loading: a bounded LRU byte cache and per-row load slots.

The cache is constructed once and passed to every consumer. Entries are
evicted least-recently-used first whenever either the entry count or the total
byte size exceeds its limit.

An ImageSlot stands for one reusable list row. Every ``show``/``reset`` bumps
the slot's generation; a load only lands if its generation is still current,
so a slow load for a recycled row never overwrites the newer content.
"""

import asyncio
import logging
import threading
from collections import OrderedDict

import httpx

from src.core.config import ImageCacheConfig

logger = logging.getLogger(__name__)


class ImageCache:
    """Thread-safe LRU cache of image bytes keyed by URL."""

    def __init__(self, count_limit: int = 100, total_bytes_limit: int = 100 * 1024 * 1024) -> None:
        if count_limit < 1 or total_bytes_limit < 1:
            msg = "cache limits must be positive"
            raise ValueError(msg)
        self._count_limit = count_limit
        self._total_bytes_limit = total_bytes_limit
        self._entries: OrderedDict[str, bytes] = OrderedDict()
        self._total_bytes = 0
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: ImageCacheConfig) -> "ImageCache":
        return cls(config.count_limit, config.total_bytes_limit)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, url: object) -> bool:
        with self._lock:
            return url in self._entries

    @property
    def total_bytes(self) -> int:
        with self._lock:
            return self._total_bytes

    def get(self, url: str) -> bytes | None:
        with self._lock:
            data = self._entries.get(url)
            if data is not None:
                self._entries.move_to_end(url)
            return data

    def put(self, url: str, data: bytes) -> bool:
        """Insert data. Returns False if it is larger than the whole cache."""
        size = len(data)
        if size > self._total_bytes_limit:
            logger.debug("Image %s (%d bytes) exceeds cache size, not cached", url, size)
            return False
        with self._lock:
            old = self._entries.pop(url, None)
            if old is not None:
                self._total_bytes -= len(old)
            self._entries[url] = data
            self._total_bytes += size
            self._evict()
        return True

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._total_bytes = 0

    def _evict(self) -> None:
        while (
            len(self._entries) > self._count_limit
            or self._total_bytes > self._total_bytes_limit
        ):
            url, data = self._entries.popitem(last=False)
            self._total_bytes -= len(data)
            logger.debug("Evicted image %s (%d bytes)", url, len(data))


class ImageLoader:
    """Cache-first image fetcher. Any failure yields None, never an exception."""

    def __init__(
        self,
        cache: ImageCache,
        config: ImageCacheConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        config = config or ImageCacheConfig()
        self._cache = cache
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=config.timeout_s, follow_redirects=True)

    @property
    def cache(self) -> ImageCache:
        return self._cache

    async def load(self, url: str) -> bytes | None:
        cached = self._cache.get(url)
        if cached is not None:
            return cached

        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.debug("Image load failed for %s: %s", url, e)
            return None

        data = response.content
        if not data:
            logger.debug("Image %s returned an empty body", url)
            return None
        self._cache.put(url, data)
        return data

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


class ImageSlot:
    """Image content of one reusable row."""

    def __init__(self, loader: ImageLoader) -> None:
        self._loader = loader
        self._generation = 0
        self._url: str | None = None
        self._content: bytes | None = None
        self._task: asyncio.Task[bool] | None = None

    @property
    def url(self) -> str | None:
        return self._url

    @property
    def content(self) -> bytes | None:
        return self._content

    @property
    def generation(self) -> int:
        return self._generation

    async def show(self, url: str) -> bool:
        """Load url into the slot. Returns True only if the bytes were assigned."""
        self._generation += 1
        generation = self._generation
        self._url = url
        self._content = None

        data = await self._loader.load(url)
        if generation != self._generation:
            logger.debug("Dropping stale image %s (slot reused)", url)
            return False
        self._content = data
        return data is not None

    def bind(self, url: str) -> "asyncio.Task[bool]":
        """Start loading url in the background, cancelling any pending load.

        Must be called from a running event loop.
        """
        self._cancel_pending()
        self._task = asyncio.get_running_loop().create_task(self.show(url))
        return self._task

    def reset(self) -> None:
        """Prepare the row for reuse: cancel the pending load and clear content."""
        self._cancel_pending()
        self._generation += 1
        self._url = None
        self._content = None

    def _cancel_pending(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
