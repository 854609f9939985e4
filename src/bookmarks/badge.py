"""Bookmark count badge kept in sync with the store."""

import logging
from collections.abc import Callable

from src.bookmarks.store import BookmarkEvent, BookmarkStore, Subscription

logger = logging.getLogger(__name__)


class BookmarkBadge:
    """Tracks the global bookmark count for a tab badge.

    Re-queries the store on every notification; events are not applied as deltas.
    """

    def __init__(
        self,
        store: BookmarkStore,
        on_change: Callable[[str | None], None] | None = None,
    ) -> None:
        self._store = store
        self._on_change = on_change
        self._value = self._compute()
        self._subscription: Subscription | None = store.subscribe(self._handle)

    @property
    def value(self) -> str | None:
        """Badge text: the count when positive, otherwise None (badge hidden)."""
        return self._value

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None

    def _compute(self) -> str | None:
        count = self._store.count
        return str(count) if count > 0 else None

    def _handle(self, event: BookmarkEvent) -> None:
        value = self._compute()
        logger.debug("Badge refresh after %s: %s", event.action.value, value)
        if value != self._value:
            self._value = value
            if self._on_change is not None:
                self._on_change(value)
