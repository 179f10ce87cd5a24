"""Key/value capability for small persisted local state.

The engine keeps three kinds of local state (the last-known postage batch
id, drafts pending upload and asset records), all keyed by string.  It
depends only on the ``KeyValueStore`` protocol; two backends are provided:

1. **SQLite** (``SQLiteStore``): persistent, survives restarts.
2. **In-memory** (``MemoryStore``): volatile, for tests and one-shot runs.

Values are JSON-serializable objects.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
    """Simple get/set/remove capability keyed by string identifiers."""

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...

    def remove(self, key: str) -> None: ...

    def keys(self, prefix: str = "") -> list[str]: ...


class MemoryStore:
    """Volatile dict-backed store."""

    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    def get(self, key: str) -> Any | None:
        raw = self._items.get(key)
        return None if raw is None else json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        # Serialize on write so stored values never alias caller objects.
        self._items[key] = json.dumps(value)

    def remove(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self, prefix: str = "") -> list[str]:
        return sorted(k for k in self._items if k.startswith(prefix))


class SQLiteStore:
    """Persistent store backed by a single SQLite table.

    Parameters
    ----------
    db_path:
        Database file; parent directories are created on demand.
    """

    def __init__(self, db_path: Path) -> None:
        db_path = Path(db_path)
        db_path.parent.mkdir(parents=True, exist_ok=True)
        self._db = sqlite3.connect(str(db_path))
        self._db.execute(
            "CREATE TABLE IF NOT EXISTS kv ("
            "  key TEXT PRIMARY KEY,"
            "  value TEXT NOT NULL,"
            "  updated_at TEXT DEFAULT (datetime('now'))"
            ")"
        )
        self._db.commit()
        logger.debug("SQLiteStore: opened %s", db_path)

    def get(self, key: str) -> Any | None:
        row = self._db.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        if row is None:
            return None
        try:
            return json.loads(row[0])
        except json.JSONDecodeError:
            logger.warning("SQLiteStore: discarding unreadable value for %s", key)
            return None

    def set(self, key: str, value: Any) -> None:
        self._db.execute(
            "INSERT INTO kv (key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value, "
            "updated_at = datetime('now')",
            (key, json.dumps(value)),
        )
        self._db.commit()

    def remove(self, key: str) -> None:
        self._db.execute("DELETE FROM kv WHERE key = ?", (key,))
        self._db.commit()

    def keys(self, prefix: str = "") -> list[str]:
        rows = self._db.execute(
            "SELECT key FROM kv WHERE substr(key, 1, ?) = ? ORDER BY key",
            (len(prefix), prefix),
        ).fetchall()
        return [r[0] for r in rows]

    def close(self) -> None:
        self._db.close()
