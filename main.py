"""CLI entry point for the random users client."""

import argparse
import asyncio
import logging
import sys

from src.bookmarks.store import BookmarkStore
from src.core.config import Settings
from src.core.db import init_db
from src.core.errors import FetchError
from src.detail.user_detail import UserDetail
from src.listing.engine import ListingDelegate, ListingEngine
from src.listing.view import BookmarkAwareView
from src.sources.randomuser import RandomUserSource


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Random users client - browse, search and bookmark generated profiles",
    )
    subparsers = parser.add_subparsers(dest="command")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        default="config/settings.yaml",
        help="Path to settings YAML file (default: config/settings.yaml)",
    )
    common.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    # --- users subcommand (default) ---
    users_parser = subparsers.add_parser("users", parents=[common], help="List users")
    users_parser.add_argument(
        "--pages",
        type=int,
        default=1,
        help="Number of pages to load (default: 1)",
    )
    users_parser.add_argument(
        "--query", "-q",
        default="",
        help="Only show users whose name, email, city or country contains this text",
    )
    users_parser.add_argument(
        "--bookmark", "-b",
        type=int,
        action="append",
        default=[],
        metavar="INDEX",
        help="Toggle the bookmark of the listed user at INDEX (repeatable)",
    )

    # --- bookmarks subcommand ---
    bookmarks_parser = subparsers.add_parser(
        "bookmarks", parents=[common], help="List bookmarked users",
    )
    bookmarks_parser.add_argument(
        "--clear",
        action="store_true",
        help="Remove all bookmarks",
    )

    # --- show subcommand ---
    show_parser = subparsers.add_parser(
        "show", parents=[common], help="Show the detail of a bookmarked user",
    )
    show_parser.add_argument("index", type=int, help="Index in the bookmarks list")
    show_parser.add_argument(
        "--share",
        action="store_true",
        help="Print the share payload instead of the detail sections",
    )

    # --- top-level flags when no subcommand is given ---
    parser.add_argument("--config", default="config/settings.yaml", help=argparse.SUPPRESS)
    parser.add_argument("--verbose", "-v", action="store_true", help=argparse.SUPPRESS)

    args = parser.parse_args(argv)

    # Default to users when no subcommand given
    if args.command is None:
        args.command = "users"
        args.pages = 1
        args.query = ""
        args.bookmark = []

    return args


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


class ConsoleDelegate(ListingDelegate):
    """Remembers the last fetch error so the CLI can report it."""

    def __init__(self) -> None:
        self.error: FetchError | None = None

    def did_receive_error(self, error: FetchError) -> None:
        self.error = error


def open_store(settings: Settings) -> BookmarkStore:
    conn = init_db(settings.bookmarks.path)
    return BookmarkStore(conn, settings.bookmarks.slot)


async def run_users(
    settings: Settings,
    store: BookmarkStore,
    pages: int,
    query: str,
    bookmark_indexes: list[int],
) -> int:
    """Load pages, apply search and bookmark toggles, print the active view."""
    delegate = ConsoleDelegate()

    async with RandomUserSource(settings.api) as source:
        engine = ListingEngine(source, settings.listing, delegate=delegate)
        for _ in range(max(pages, 1)):
            if not await engine.load_next():
                break

    if delegate.error is not None:
        print(f"Error: {delegate.error}", file=sys.stderr)
        if not engine.users:
            engine.close()
            return 1

    if query:
        engine.set_query(query)

    view = BookmarkAwareView(engine, store)
    for index in bookmark_indexes:
        state = view.toggle_bookmark_at(index)
        if state is None:
            print(f"No user at index {index}", file=sys.stderr)

    if engine.is_empty:
        title, subtitle = engine.empty_state_message()
        print(f"{title}. {subtitle}.")
    for i, (user, flag) in enumerate(zip(engine.current_users, view.bookmark_flags())):
        marker = "*" if flag else " "
        print(
            f"{i:4d} {marker} {user.full_name} <{user.email}> "
            f"{user.location.city}, {user.location.country}",
        )

    print(f"\n{engine.user_count} shown, {len(engine.users)} loaded, "
          f"{view.badge_count} bookmarked (seed {engine.seed})")
    engine.close()
    return 1 if delegate.error is not None else 0


def cmd_bookmarks(store: BookmarkStore, clear: bool) -> int:
    if clear:
        store.clear_all()
        print("All bookmarks cleared.")
        return 0

    users = store.bookmarked_users
    if not users:
        print("No bookmarks yet.")
        return 0
    for i, user in enumerate(users):
        print(f"{i:4d}   {user.full_name} <{user.email}> {user.phone}")
    print(f"\n{len(users)} bookmarked")
    return 0


def cmd_show(store: BookmarkStore, index: int, share: bool) -> int:
    users = store.bookmarked_users
    if index < 0 or index >= len(users):
        print(f"No bookmarked user at index {index}", file=sys.stderr)
        return 1

    detail = UserDetail(users[index], store)
    try:
        if share:
            for item in detail.share_items():
                print(item)
            return 0
        print(detail.title)
        for section in detail.sections:
            print(f"\n[{section.title}]")
            for row in section.rows:
                print(f"  {row.label}: {row.value}")
        return 0
    finally:
        detail.close()


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = Settings.from_yaml(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    store = open_store(settings)

    if args.command == "bookmarks":
        code = cmd_bookmarks(store, args.clear)
    elif args.command == "show":
        code = cmd_show(store, args.index, args.share)
    else:
        code = asyncio.run(
            run_users(settings, store, args.pages, args.query, args.bookmark),
        )

    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()
