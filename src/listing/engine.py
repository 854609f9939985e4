"""Paginated listing engine: sequential page loads into a growing collection.

State per screen session:
  - users: append-only, fetch order (page 1 replaces, for refresh)
  - next_page: starts at 1, +1 per successful page
  - seed: captured from the first successful page, replayed on every later fetch
  - exhausted: set once a page comes back shorter than page_size
  - loading: true while exactly one fetch is in flight

All calls are expected on one event loop. ``loading`` is set before the first
await, so overlapping ``load_next()`` calls collapse into a single fetch.
A failed fetch leaves every pagination field untouched; calling again retries
the same page. ``refresh()`` during a fetch waits for that fetch to settle
before issuing page 1, so at most one request is ever outstanding.
"""

import asyncio
import logging

from src.core.config import ListingConfig
from src.core.errors import FetchError
from src.core.schemas import Page, UserRecord
from src.listing.search import SearchProjection
from src.sources.base import UserSource

logger = logging.getLogger(__name__)


class ListingDelegate:
    """Receives listing notifications. Override only what you need."""

    def did_update_users(self) -> None:
        pass

    def did_update_search_results(self) -> None:
        pass

    def did_receive_error(self, error: FetchError) -> None:
        pass

    def did_start_loading(self) -> None:
        pass

    def did_finish_loading(self) -> None:
        pass


_NO_DELEGATE = ListingDelegate()


class ListingEngine:
    """Owns the fetched users, pagination state, and the search projection.

    Usage::

        engine = ListingEngine(source, settings.listing, delegate=screen)
        await engine.load_next()
        engine.set_query("berlin")
        ...
        engine.close()
    """

    def __init__(
        self,
        source: UserSource,
        config: ListingConfig | None = None,
        delegate: ListingDelegate | None = None,
    ) -> None:
        self._source = source
        self._config = config or ListingConfig()
        self._delegate = delegate or _NO_DELEGATE
        self._search = SearchProjection()

        self._users: list[UserRecord] = []
        self._next_page = 1
        self._seed: str | None = None
        self._exhausted = False
        self._loading = False

        # Bumped by refresh() and close(); completions from an older
        # generation are discarded.
        self._generation = 0
        self._inflight: asyncio.Future[Page] | None = None
        self._disposed = False

    # -- pagination state ------------------------------------------------

    @property
    def users(self) -> list[UserRecord]:
        return list(self._users)

    @property
    def next_page(self) -> int:
        return self._next_page

    @property
    def seed(self) -> str | None:
        return self._seed

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def is_exhausted(self) -> bool:
        return self._exhausted

    @property
    def has_more_data(self) -> bool:
        return not self._exhausted

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def delegate(self) -> ListingDelegate | None:
        return None if self._delegate is _NO_DELEGATE else self._delegate

    @delegate.setter
    def delegate(self, value: ListingDelegate | None) -> None:
        self._delegate = value or _NO_DELEGATE

    # -- active view -----------------------------------------------------

    @property
    def query(self) -> str:
        return self._search.query

    @property
    def is_searching(self) -> bool:
        return self._search.is_searching

    @property
    def filtered_users(self) -> list[UserRecord]:
        return self._search.filtered

    @property
    def current_users(self) -> list[UserRecord]:
        """The active view: filtered users while searching, else all users."""
        return list(self._search.active_view(self._users))

    @property
    def user_count(self) -> int:
        return len(self._search.active_view(self._users))

    @property
    def is_empty(self) -> bool:
        return self.user_count == 0

    def user_at(self, index: int) -> UserRecord | None:
        view = self._search.active_view(self._users)
        if index < 0 or index >= len(view):
            return None
        return view[index]

    # -- loading ---------------------------------------------------------

    async def load_next(self) -> bool:
        """Fetch and apply the next page.

        Returns True if a page was applied. Returns False without fetching when
        a load is already in flight, the listing is exhausted, or the engine
        is closed; returns False after reporting a fetch failure.
        """
        if self._disposed or self._loading or self._exhausted:
            return False

        self._loading = True
        generation = self._generation
        page_index = self._next_page
        self._delegate.did_start_loading()

        logger.debug("Loading page %d from %s", page_index, self._source.source_id)
        fetch = asyncio.ensure_future(
            self._source.fetch_page(page_index, self._config.page_size, self._seed),
        )
        self._inflight = fetch
        try:
            try:
                page = await fetch
            except FetchError as e:
                if self._is_current(generation):
                    logger.warning("Loading page %d failed: %s", page_index, e)
                    self._delegate.did_receive_error(e)
                return False

            if not self._is_current(generation):
                logger.debug("Discarding page %d from an abandoned session", page_index)
                return False

            self._apply(page, page_index)
            return True
        finally:
            if self._inflight is fetch:
                self._inflight = None
            if self._is_current(generation):
                self._loading = False
                self._delegate.did_finish_loading()

    async def refresh(self) -> bool:
        """Restart the session from page 1 with an empty collection and no search.

        A fetch still in flight is awaited (its result discarded) before page 1
        is requested; ``loading`` stays set throughout. Returns False if another
        refresh or ``close()`` superseded this one while it waited.
        The seed is kept only when ``keep_seed_on_refresh`` is configured.
        """
        if self._disposed:
            return False

        self._generation += 1
        generation = self._generation
        self._reset_session()

        pending = self._inflight
        if pending is not None and not pending.done():
            logger.debug("Refresh waiting for the in-flight fetch to settle")
            await asyncio.wait([pending])
            if not self._is_current(generation):
                return False
            self._loading = False
            self._delegate.did_finish_loading()

        logger.info("Refreshing listing (seed %s)", "kept" if self._seed else "reset")
        return await self.load_next()

    def _reset_session(self) -> None:
        self._next_page = 1
        self._exhausted = False
        if not self._config.keep_seed_on_refresh:
            self._seed = None
        self._users = []
        if self._search.is_searching:
            self.clear_search()

    async def load_more_if_needed(self, visible_index: int) -> bool:
        """Prefetch trigger for a row becoming visible.

        Loads the next page when not searching and the row is within
        ``prefetch_threshold`` of the end of the collection.
        """
        if self._search.is_searching or self._loading or self._exhausted:
            return False
        if visible_index < len(self._users) - self._config.prefetch_threshold:
            return False
        return await self.load_next()

    def _apply(self, page: Page, page_index: int) -> None:
        if self._seed is None and page.seed:
            self._seed = page.seed

        if page_index == 1:
            self._users = list(page.results)
        else:
            self._users.extend(page.results)

        self._next_page = page_index + 1

        if len(page.results) < self._config.page_size:
            self._exhausted = True
            logger.info("Listing exhausted after page %d", page_index)

        logger.info(
            "Page %d: %d users (total %d)", page_index, len(page.results), len(self._users),
        )

        if self._search.is_searching:
            self._search.recompute(self._users)
            self._delegate.did_update_search_results()
        else:
            self._delegate.did_update_users()

    def _is_current(self, generation: int) -> bool:
        return not self._disposed and generation == self._generation

    # -- search ----------------------------------------------------------

    def set_query(self, text: str) -> None:
        """Apply live search text. Empty text reverts to the full collection."""
        if self._search.set_query(text, self._users):
            self._delegate.did_update_search_results()
        else:
            self._delegate.did_update_users()

    def clear_search(self) -> None:
        self._search.clear()
        self._delegate.did_update_users()

    # -- presentation helpers -------------------------------------------

    def empty_state_message(self) -> tuple[str, str]:
        if self._search.is_searching:
            return ("No users found", "Try adjusting your search criteria")
        return ("No users available", "Pull to refresh or check your connection")

    def should_show_initial_loading(self) -> bool:
        return self._loading and not self._users

    def close(self) -> None:
        """Dispose the engine. Later completions of in-flight fetches are ignored."""
        if self._disposed:
            return
        self._disposed = True
        self._generation += 1
        self._loading = False
        self._delegate = _NO_DELEGATE
        logger.debug("Listing engine closed")
