"""Bookmark-aware view over the listing's active view.

Bookmark membership is read from the store on every call and never cached,
so rows and badges always reflect the persisted set.
"""

import logging

from src.bookmarks.store import BookmarkStore
from src.listing.engine import ListingEngine

logger = logging.getLogger(__name__)


class BookmarkAwareView:
    """Answers "is the row at this index bookmarked" for the listing screen."""

    def __init__(self, engine: ListingEngine, store: BookmarkStore) -> None:
        self._engine = engine
        self._store = store

    def is_bookmarked_at(self, index: int) -> bool:
        """False for out-of-range indexes."""
        user = self._engine.user_at(index)
        if user is None:
            return False
        return self._store.is_bookmarked(user.identity_key)

    def toggle_bookmark_at(self, index: int) -> bool | None:
        """Toggle the row's bookmark.

        Returns the new bookmarked state, or None if the index is out of range.
        """
        user = self._engine.user_at(index)
        if user is None:
            logger.debug("toggle_bookmark_at(%d): no row at index", index)
            return None
        return self._store.toggle(user)

    def bookmark_flags(self) -> list[bool]:
        """Bookmark state for every row of the active view, in order."""
        return [self._store.is_bookmarked(u.identity_key) for u in self._engine.current_users]

    @property
    def badge_count(self) -> int:
        """Global bookmark count, independent of search state."""
        return self._store.count
