"""
FILE: kanbo/core/repository.py
PURPOSE: Durable key-value storage backends for the persisted board
EXPORTS:
  - StorageBackend (Protocol: get(key), set(key, value))
  - MemoryStorage (dict-backed backend)
  - SqliteStorage (SQLite-backed backend)
  - get_connection(db_path) -> Connection
  - init_database(conn) -> None
DEPENDENCIES:
  - sqlite3 (stdlib)
  - pathlib, os (stdlib)
  - datetime (stdlib)
  - kanbo.core.exceptions (StorageError)
NOTES:
  - Database stored at ~/.kanbo/kanbo.db, or $KANBO_HOME/kanbo.db
  - Auto-creates directory and initializes schema on first connection
  - Uses row_factory for dict-like row access
  - sqlite3.Error is re-raised as StorageError with the key for context
"""

import os
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional, Protocol

from .exceptions import StorageError


# Database file location (cross-platform, overridable for scripting)
DB_DIR = Path(os.environ.get("KANBO_HOME", Path.home() / ".kanbo"))
DB_PATH = DB_DIR / "kanbo.db"

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""


class StorageBackend(Protocol):
    """A durable slot store: the persistence adapter is its only caller."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryStorage:
    """Dict-backed storage. Contents live as long as the instance."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


def get_connection(db_path: Optional[Path] = None) -> sqlite3.Connection:
    """
    Get SQLite connection to the kanbo database.

    Creates the parent directory if it doesn't exist.
    Enables row_factory for dict-like row access.
    Initializes database schema on first connection.
    """
    db_path = Path(db_path) if db_path is not None else DB_PATH

    # Ensure directory exists
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row

    init_database(conn)

    return conn


def init_database(conn: sqlite3.Connection) -> None:
    """
    Initialize database schema if the table doesn't exist.

    Safe to call multiple times (uses CREATE TABLE IF NOT EXISTS).
    """
    conn.execute(SCHEMA_SQL)
    conn.commit()


class SqliteStorage:
    """
    SQLite-backed storage: one row per key in the kv_store table.

    db_path defaults to the module-level DB_PATH, read at call time so tests
    can monkeypatch it.
    """

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        return get_connection(self.db_path if self.db_path is not None else DB_PATH)

    def get(self, key: str) -> Optional[str]:
        """
        Fetch the value stored under key.

        Returns:
            Stored string, or None if the key was never set

        Raises:
            StorageError: If the database cannot be read
        """
        try:
            conn = self._connect()
            try:
                row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
            finally:
                conn.close()
        except (sqlite3.Error, OSError) as e:
            raise StorageError(key, str(e)) from e

        return row["value"] if row else None

    def set(self, key: str, value: str) -> None:
        """
        Store value under key, overwriting any previous value.

        Raises:
            StorageError: If the database cannot be written
        """
        now = datetime.now(timezone.utc).isoformat()
        try:
            conn = self._connect()
            try:
                conn.execute(
                    """
                    INSERT INTO kv_store (key, value, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                    """,
                    (key, value, now),
                )
                conn.commit()
            finally:
                conn.close()
        except (sqlite3.Error, OSError) as e:
            raise StorageError(key, str(e)) from e
