"""
Key-value storage for persisted governance state.

Governance modules receive a store as a capability instead of reaching for a
global. Values are strings (JSON blobs or decimal counters).

Two implementations:
- InMemoryKeyValueStore: session-scoped state, tests
- SQLiteKeyValueStore: device-scoped state that outlives the process

Concurrent writers (two tabs, two processes) are last-write-wins.
"""

import logging
import sqlite3
from typing import Dict, Optional, Protocol

logger = logging.getLogger("home_advisory.storage")


class StorageError(Exception):
    """Raised when a store cannot be read or written."""
    pass


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class InMemoryKeyValueStore:
    """Dict-backed store. One instance per session for session-scoped keys."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self):
        return list(self._data.keys())


class SQLiteKeyValueStore:
    """
    Persistent store on SQLite.
    Use ":memory:" for an ephemeral database.
    """

    def __init__(self, db_path: str = ":memory:"):
        self.db_path = db_path
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._init_schema()

    def _init_schema(self) -> None:
        """Create the kv table if it doesn't exist."""
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL DEFAULT (datetime('now'))
            )
        """)
        self._conn.commit()

    def get(self, key: str) -> Optional[str]:
        try:
            row = self._conn.execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read {key!r}: {e}") from e
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        try:
            self._conn.execute(
                """
                INSERT INTO kv_store (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = datetime('now')
                """,
                (key, value),
            )
            self._conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to write {key!r}: {e}") from e
        logger.debug("Stored %s (%d bytes)", key, len(value))

    def delete(self, key: str) -> None:
        try:
            self._conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            self._conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to delete {key!r}: {e}") from e

    def close(self) -> None:
        self._conn.close()
