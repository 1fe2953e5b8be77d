"""Local database schema and key/value access.

The local database holds a single ``kv`` table, used like browser local
storage: the expense list and the auth session are each stored as one
serialized value under a fixed key.
"""

import os
import sqlite3
from pathlib import Path


def get_xdg_data_home() -> Path:
    """Get XDG data directory, with fallback to ~/.local/share."""
    xdg_data = os.environ.get("XDG_DATA_HOME")
    if xdg_data:
        return Path(xdg_data)
    return Path.home() / ".local" / "share"


def get_db_path() -> Path:
    """Get the default database path (XDG compliant)."""
    return get_xdg_data_home() / "custos" / "custos.db"


def database_exists(db_path: Path | None = None) -> bool:
    """Check if the database file exists.

    Args:
        db_path: Path to check. If None, uses default location.

    Returns:
        True if database exists, False otherwise.
    """
    if db_path is None:
        db_path = get_db_path()
    return db_path.exists()


def init_database(db_path: Path | None = None) -> None:
    """Initialize the database with the required schema.

    Args:
        db_path: Path to the database file. If None, uses default location.

    Raises:
        sqlite3.Error: If database initialization fails.
    """
    if db_path is None:
        db_path = get_db_path()

    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()

    try:
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL DEFAULT (datetime('now'))
            )
        """
        )
        conn.commit()

    except sqlite3.Error:
        conn.rollback()
        raise
    finally:
        conn.close()


def _connect(db_path: Path | None = None) -> sqlite3.Connection:
    """Open the database, creating the schema on first use."""
    if db_path is None:
        db_path = get_db_path()
    if not db_path.exists():
        init_database(db_path)
    return sqlite3.connect(db_path)


def get_item(key: str, db_path: Path | None = None) -> str | None:
    """Read the value stored under ``key``.

    Returns:
        Stored value, or None if the key is absent.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    conn = _connect(db_path)
    try:
        row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None
    finally:
        conn.close()


def set_item(key: str, value: str, db_path: Path | None = None) -> None:
    """Store ``value`` under ``key``, replacing any previous value.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    conn = _connect(db_path)
    try:
        conn.execute(
            """
            INSERT INTO kv (key, value, updated_at) VALUES (?, ?, datetime('now'))
            ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
            """,
            (key, value),
        )
        conn.commit()
    except sqlite3.Error:
        conn.rollback()
        raise
    finally:
        conn.close()


def remove_item(key: str, db_path: Path | None = None) -> None:
    """Delete the value stored under ``key`` (no-op if absent).

    Raises:
        sqlite3.Error: If database operation fails.
    """
    conn = _connect(db_path)
    try:
        conn.execute("DELETE FROM kv WHERE key = ?", (key,))
        conn.commit()
    except sqlite3.Error:
        conn.rollback()
        raise
    finally:
        conn.close()
