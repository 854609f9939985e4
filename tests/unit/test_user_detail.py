"""Tests for the user detail screen state and share payload."""

from pathlib import Path

import pytest

from src.bookmarks.store import BookmarkStore
from src.core.db import init_db
from src.core.schemas import UserRecord
from src.detail.user_detail import UserDetail, build_sections, share_text


@pytest.fixture
def store(tmp_path: Path) -> BookmarkStore:
    return BookmarkStore(init_db(tmp_path / "bm.db"))


@pytest.fixture
def user(make_user) -> UserRecord:  # type: ignore[no-untyped-def]
    return make_user(7, first="Jane", last="Smith", city="Portland")


class TestBuildSections:
    def test_section_titles(self, user: UserRecord) -> None:
        assert [s.title for s in build_sections(user)] == ["Contact", "Location", "Personal"]

    def test_contact_rows(self, user: UserRecord) -> None:
        contact = build_sections(user)[0]
        assert [(r.label, r.value) for r in contact.rows] == [
            ("Email", "user7@example.com"),
            ("Phone", "(555) 010-0000"),
            ("Cell", "(555) 010-0001"),
        ]

    def test_location_rows(self, user: UserRecord) -> None:
        rows = {r.label: r.value for r in build_sections(user)[1].rows}
        assert rows["Address"] == "107 Main Street, Portland, Oregon, United States, 12345"
        assert rows["Coordinates"] == "45.5, -122.6"
        assert rows["Timezone"] == "-8:00 Pacific Time"

    def test_personal_rows(self, user: UserRecord) -> None:
        rows = {r.label: r.value for r in build_sections(user)[2].rows}
        assert rows["Gender"] == "Female"
        assert rows["Age"] == "30"
        assert rows["Date of birth"] == "1994-03-01"
        assert rows["Nationality"] == "US"
        assert rows["Username"] == "user7"


class TestShareText:
    def test_contact_card(self, user: UserRecord) -> None:
        lines = share_text(user).splitlines()
        assert lines[0] == "Ms Jane Smith"
        assert "Email: user7@example.com" in lines
        assert "Phone: (555) 010-0000" in lines
        assert lines[-1].startswith("Address: 107 Main Street")


class TestUserDetail:
    def test_title_and_user(self, user: UserRecord, store: BookmarkStore) -> None:
        detail = UserDetail(user, store)
        assert detail.title == "Ms Jane Smith"
        assert detail.user is user
        assert len(detail.sections) == 3

    def test_initial_state_from_store(self, user: UserRecord, store: BookmarkStore) -> None:
        store.add(user)
        assert UserDetail(user, store).is_bookmarked is True

    def test_toggle_updates_store(self, user: UserRecord, store: BookmarkStore) -> None:
        detail = UserDetail(user, store)
        assert detail.toggle_bookmark() is True
        assert store.is_bookmarked(user)
        assert detail.toggle_bookmark() is False
        assert not store.is_bookmarked(user)

    def test_share_items(self, user: UserRecord, store: BookmarkStore) -> None:
        items = UserDetail(user, store).share_items()
        assert items == [share_text(user), "https://randomuser.me/api/portraits/women/7.jpg"]

    def test_follows_changes_from_elsewhere(self, user: UserRecord, store: BookmarkStore) -> None:
        changes: list[bool] = []
        detail = UserDetail(user, store, on_bookmark_change=changes.append)
        store.add(user)
        assert detail.is_bookmarked is True
        store.clear_all()
        assert detail.is_bookmarked is False
        assert changes == [True, False]

    def test_ignores_other_users(self, user: UserRecord, store: BookmarkStore, make_user) -> None:  # type: ignore[no-untyped-def]
        changes: list[bool] = []
        UserDetail(user, store, on_bookmark_change=changes.append)
        store.add(make_user(8))
        assert changes == []

    def test_own_toggle_does_not_echo(self, user: UserRecord, store: BookmarkStore) -> None:
        changes: list[bool] = []
        detail = UserDetail(user, store, on_bookmark_change=changes.append)
        detail.toggle_bookmark()
        assert changes == []

    def test_close_stops_sync(self, user: UserRecord, store: BookmarkStore) -> None:
        detail = UserDetail(user, store)
        detail.close()
        store.add(user)
        assert detail.is_bookmarked is False
        detail.close()
