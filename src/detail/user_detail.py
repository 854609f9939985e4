"""User detail: display sections, bookmark toggle, and share payload."""

import logging
from collections.abc import Callable

from pydantic import BaseModel, ConfigDict

from src.bookmarks.store import BookmarkEvent, BookmarkStore, Subscription
from src.core.schemas import UserRecord

logger = logging.getLogger(__name__)


class DetailRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    value: str


class DetailSection(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    rows: list[DetailRow]


def build_sections(user: UserRecord) -> list[DetailSection]:
    """Group a user's fields the way the detail screen shows them."""
    loc = user.location
    return [
        DetailSection(
            title="Contact",
            rows=[
                DetailRow(label="Email", value=user.email),
                DetailRow(label="Phone", value=user.phone),
                DetailRow(label="Cell", value=user.cell),
            ],
        ),
        DetailSection(
            title="Location",
            rows=[
                DetailRow(label="Address", value=user.full_address),
                DetailRow(label="Coordinates", value=f"{loc.coordinates.latitude}, {loc.coordinates.longitude}"),
                DetailRow(label="Timezone", value=f"{loc.timezone.offset} {loc.timezone.description}"),
            ],
        ),
        DetailSection(
            title="Personal",
            rows=[
                DetailRow(label="Gender", value=user.gender.capitalize()),
                DetailRow(label="Age", value=str(user.age)),
                DetailRow(label="Date of birth", value=user.dob.date[:10]),
                DetailRow(label="Nationality", value=user.nat),
                DetailRow(label="Username", value=user.login.username),
            ],
        ),
    ]


def share_text(user: UserRecord) -> str:
    """Plain-text contact card handed to the platform share sheet."""
    lines = [
        user.full_name,
        f"Email: {user.email}",
        f"Phone: {user.phone}",
        f"Cell: {user.cell}",
        f"Address: {user.full_address}",
    ]
    return "\n".join(lines)


class UserDetail:
    """State behind the detail screen of one user.

    Keeps ``is_bookmarked`` in sync with changes made from other screens for as
    long as it is open; call ``close()`` when the screen goes away.
    """

    def __init__(
        self,
        user: UserRecord,
        store: BookmarkStore,
        on_bookmark_change: Callable[[bool], None] | None = None,
    ) -> None:
        self._user = user
        self._store = store
        self._on_bookmark_change = on_bookmark_change
        self._bookmarked = store.is_bookmarked(user)
        self._subscription: Subscription | None = store.subscribe(self._handle)

    @property
    def user(self) -> UserRecord:
        return self._user

    @property
    def title(self) -> str:
        return self._user.full_name

    @property
    def sections(self) -> list[DetailSection]:
        return build_sections(self._user)

    @property
    def is_bookmarked(self) -> bool:
        return self._bookmarked

    def toggle_bookmark(self) -> bool:
        """Flip the bookmark and return the new state."""
        self._bookmarked = self._store.toggle(self._user)
        return self._bookmarked

    def share_items(self) -> list[str]:
        """Items for the share action: the contact card and the large picture URL."""
        return [share_text(self._user), self._user.picture.large]

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None

    def _handle(self, event: BookmarkEvent) -> None:
        if event.user is not None and event.user != self._user:
            return
        bookmarked = self._store.is_bookmarked(self._user)
        if bookmarked != self._bookmarked:
            self._bookmarked = bookmarked
            logger.debug("Detail bookmark state for %s -> %s", self._user.identity_key, bookmarked)
            if self._on_bookmark_change is not None:
                self._on_bookmark_change(bookmarked)
