"""Bookmark store: a persisted set of users keyed by identity key.

The store keeps the set in memory and writes the whole set to one key-value
slot after every change. A failed write is logged and the in-memory set stays
authoritative until the next successful save. A missing or corrupt slot loads
as an empty set.

Observers receive a BookmarkEvent after each change that altered membership
(plus every ``clear_all``). Delivery happens outside the store lock, so an
observer may call back into the store; observers should treat each event as
"re-check current state".
"""

import json
import logging
import sqlite3
import threading
from collections.abc import Callable
from enum import Enum
from types import TracebackType

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from src.core.db import delete_value, get_value, set_value
from src.core.schemas import UserRecord

logger = logging.getLogger(__name__)

_USERS_ADAPTER = TypeAdapter(list[UserRecord])


class BookmarkAction(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    CLEARED = "cleared"


class BookmarkEvent(BaseModel):
    """Change notification. ``user`` is None for CLEARED."""

    model_config = ConfigDict(frozen=True)

    action: BookmarkAction
    user: UserRecord | None = None
    count: int


BookmarkObserver = Callable[[BookmarkEvent], None]


class Subscription:
    """Handle returned by ``BookmarkStore.subscribe``.

    Call ``cancel()`` (or leave a ``with`` block) when the owning screen goes away.
    """

    def __init__(self, store: "BookmarkStore", observer: BookmarkObserver) -> None:
        self._store = store
        self._observer = observer
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        if self._active:
            self._store.unsubscribe(self._observer)
            self._active = False

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.cancel()


class BookmarkStore:
    """Thread-safe bookmark set persisted in a SQLite key-value slot.

    Usage::

        store = BookmarkStore(init_db("data/bookmarks.db"))
        with store.subscribe(lambda event: print(event.action)):
            store.toggle(user)
    """

    def __init__(self, conn: sqlite3.Connection, slot: str = "BookmarkedUsers") -> None:
        self._conn = conn
        self._slot = slot
        self._lock = threading.Lock()
        self._observers: list[BookmarkObserver] = []
        self._users: dict[str, UserRecord] = self._load()

    # -- queries ---------------------------------------------------------

    def is_bookmarked(self, user_or_key: UserRecord | str) -> bool:
        key = user_or_key if isinstance(user_or_key, str) else user_or_key.identity_key
        with self._lock:
            return key in self._users

    @property
    def count(self) -> int:
        with self._lock:
            return len(self._users)

    @property
    def bookmarked_users(self) -> list[UserRecord]:
        """Bookmarked users in the order they were added."""
        with self._lock:
            return list(self._users.values())

    # -- mutations -------------------------------------------------------

    def add(self, user: UserRecord) -> bool:
        """Bookmark user. Returns False (and emits nothing) if already present."""
        with self._lock:
            event = self._add_locked(user)
        if event is None:
            return False
        self._notify(event)
        return True

    def remove(self, user: UserRecord) -> bool:
        """Remove user's bookmark. Returns False (and emits nothing) if absent."""
        with self._lock:
            event = self._remove_locked(user)
        if event is None:
            return False
        self._notify(event)
        return True

    def toggle(self, user: UserRecord) -> bool:
        """Flip user's bookmark. Returns True if the user is bookmarked afterwards."""
        with self._lock:
            if user.identity_key in self._users:
                event = self._remove_locked(user)
            else:
                event = self._add_locked(user)
        if event is None:
            return False
        self._notify(event)
        return event.action is BookmarkAction.ADDED

    def _add_locked(self, user: UserRecord) -> BookmarkEvent | None:
        if user.identity_key in self._users:
            return None
        self._users[user.identity_key] = user
        self._save()
        logger.info("Added bookmark for %s", user.full_name)
        return BookmarkEvent(action=BookmarkAction.ADDED, user=user, count=len(self._users))

    def _remove_locked(self, user: UserRecord) -> BookmarkEvent | None:
        if self._users.pop(user.identity_key, None) is None:
            return None
        self._save()
        logger.info("Removed bookmark for %s", user.full_name)
        return BookmarkEvent(action=BookmarkAction.REMOVED, user=user, count=len(self._users))

    def clear_all(self) -> None:
        """Remove every bookmark. Always emits CLEARED, even when already empty."""
        with self._lock:
            self._users.clear()
            try:
                delete_value(self._conn, self._slot)
            except sqlite3.Error:
                logger.warning("Failed to clear bookmark slot '%s'", self._slot, exc_info=True)
            event = BookmarkEvent(action=BookmarkAction.CLEARED, count=0)
        logger.info("Cleared all bookmarks")
        self._notify(event)

    # -- observers -------------------------------------------------------

    def subscribe(self, observer: BookmarkObserver) -> Subscription:
        with self._lock:
            self._observers.append(observer)
        return Subscription(self, observer)

    def unsubscribe(self, observer: BookmarkObserver) -> None:
        with self._lock:
            try:
                self._observers.remove(observer)
            except ValueError:
                logger.debug("Observer was not subscribed")

    def _notify(self, event: BookmarkEvent) -> None:
        with self._lock:
            observers = list(self._observers)
        for observer in observers:
            try:
                observer(event)
            except Exception:
                logger.exception("Bookmark observer failed on %s event", event.action.value)

    # -- persistence -----------------------------------------------------

    def _load(self) -> dict[str, UserRecord]:
        """Read the slot. Missing, unreadable, or corrupt data yields an empty set."""
        try:
            raw = get_value(self._conn, self._slot)
        except sqlite3.Error:
            logger.warning("Failed to read bookmark slot '%s'", self._slot, exc_info=True)
            return {}
        if raw is None:
            return {}
        try:
            users = _USERS_ADAPTER.validate_json(raw)
        except ValidationError as e:
            logger.warning(
                "Bookmark slot '%s' is corrupt (%d errors), starting empty",
                self._slot, e.error_count(),
            )
            return {}
        loaded = {u.identity_key: u for u in users}
        logger.debug("Loaded %d bookmarks from '%s'", len(loaded), self._slot)
        return loaded

    def _save(self) -> None:
        try:
            payload = json.dumps(
                [u.model_dump(mode="json") for u in self._users.values()],
            )
            set_value(self._conn, self._slot, payload)
        except (sqlite3.Error, TypeError, ValueError):
            logger.warning("Failed to save bookmarks to '%s'", self._slot, exc_info=True)
