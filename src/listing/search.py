"""Search projection over the loaded users.

Matching is case-insensitive substring containment on full name, email,
city, and country. The filtered view keeps collection order.
"""

import logging

from src.core.schemas import UserRecord

logger = logging.getLogger(__name__)


class QueryFilter:
    """Keep users whose searchable fields contain the query (case-insensitive)."""

    def __init__(self, query: str) -> None:
        self._query = query.lower()

    def __call__(self, users: list[UserRecord]) -> list[UserRecord]:
        if not self._query:
            return list(users)
        return [u for u in users if self.matches(u)]

    def matches(self, user: UserRecord) -> bool:
        fields = (
            user.full_name,
            user.email,
            user.location.city,
            user.location.country,
        )
        return any(self._query in f.lower() for f in fields)


class SearchProjection:
    """Holds the live query and the filtered subsequence it selects.

    A non-empty query means "searching"; the active view is then the filtered
    list, otherwise the full collection.
    """

    def __init__(self) -> None:
        self._query = ""
        self._filtered: list[UserRecord] = []

    @property
    def query(self) -> str:
        return self._query

    @property
    def is_searching(self) -> bool:
        return bool(self._query)

    @property
    def filtered(self) -> list[UserRecord]:
        return list(self._filtered)

    def set_query(self, text: str, collection: list[UserRecord]) -> bool:
        """Store the query and recompute. Returns True if now searching."""
        self._query = text
        if not text:
            self._filtered = []
            return False
        self.recompute(collection)
        return True

    def recompute(self, collection: list[UserRecord]) -> None:
        """Re-derive the filtered view after the collection changed."""
        if not self._query:
            return
        self._filtered = QueryFilter(self._query)(collection)
        logger.debug(
            "Search '%s': %d of %d users match",
            self._query, len(self._filtered), len(collection),
        )

    def clear(self) -> None:
        self._query = ""
        self._filtered = []

    def active_view(self, collection: list[UserRecord]) -> list[UserRecord]:
        return self._filtered if self.is_searching else collection
