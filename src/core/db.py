"""SQLite key-value storage for locally persisted client state."""

import sqlite3
from pathlib import Path

_KV_TABLE = """
CREATE TABLE IF NOT EXISTS kv (
    key         TEXT PRIMARY KEY,
    value       TEXT NOT NULL,
    updated_at  TEXT NOT NULL DEFAULT (datetime('now'))
);
"""


def init_db(path: str | Path) -> sqlite3.Connection:
    """Create the database and tables, returning a connection.

    The connection may be shared across threads; callers serialize access.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute(_KV_TABLE)
    conn.commit()
    return conn


def get_value(conn: sqlite3.Connection, key: str) -> str | None:
    """Return the raw value stored under key, or None if the slot is empty."""
    row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
    if row is None:
        return None
    return row["value"]  # type: ignore[no-any-return]


def set_value(conn: sqlite3.Connection, key: str, value: str) -> None:
    """Store value under key, replacing any previous value."""
    conn.execute(
        """
        INSERT INTO kv (key, value, updated_at)
        VALUES (?, ?, datetime('now'))
        ON CONFLICT(key)
        DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
        """,
        (key, value),
    )
    conn.commit()


def delete_value(conn: sqlite3.Connection, key: str) -> bool:
    """Remove key. Returns True if a row was deleted."""
    cursor = conn.execute("DELETE FROM kv WHERE key = ?", (key,))
    conn.commit()
    return cursor.rowcount > 0
