"""
Key-value persistence for one local profile.

Values are JSON-serialisable objects stored as JSON text. Two backends share
the ``KeyValueStore`` interface:

  SqliteStore  — one SQLite file per profile, used by the app and the CLI
  MemoryStore  — dict-backed, used in tests

Schema
──────
table: kv
  key    TEXT PRIMARY KEY
  value  TEXT NOT NULL  (JSON)
"""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Optional, Protocol

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """get / set / remove by key, JSON values."""

    def get(self, key: str) -> Optional[Any]: ...

    def set(self, key: str, value: Any) -> None: ...

    def remove(self, key: str) -> None: ...


def _decode(key: str, raw: Optional[str]) -> Optional[Any]:
    """Parse stored JSON text; corrupt values read as missing."""
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.warning("Ignoring corrupt value for key=%r: %s", key, exc)
        return None


class SqliteStore:
    """SQLite-backed ``KeyValueStore``."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._init_db()

    @contextmanager
    def _connect(self):
        """Yield a connected sqlite3.Connection, creating the file/dir if needed."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self.path))
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key   TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )
        logger.info("Key-value store initialised at %s", self.path)

    def get(self, key: str) -> Optional[Any]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT value FROM kv WHERE key = ?", (key,)
            ).fetchone()
        return _decode(key, row[0] if row else None)

    def set(self, key: str, value: Any) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO kv (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, json.dumps(value)),
            )

    def remove(self, key: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM kv WHERE key = ?", (key,))


class MemoryStore:
    """In-memory ``KeyValueStore``; values still round-trip through JSON."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> Optional[Any]:
        return _decode(key, self._data.get(key))

    def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def set_raw(self, key: str, raw: str) -> None:
        """Store *raw* text as-is (lets tests plant corrupt values)."""
        self._data[key] = raw
