from __future__ import annotations

import json
import sqlite3
import threading
import time
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from .errors import PersistenceError


class KeyValueStore(Protocol):
    """Local key-value storage holding encoded blobs under fixed keys."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class MemoryKeyValueStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def close(self) -> None:
        return None


class SQLiteKeyValueStore:
    """SQLite persistence for the tracker's encoded blobs."""

    def __init__(self, path: str) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self.conn = sqlite3.connect(self.path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self._init_schema()

    def close(self) -> None:
        if self.conn is not None:
            self.conn.close()
            self.conn = None

    def _init_schema(self) -> None:
        self.conn.execute(
            """
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at REAL NOT NULL
            )
            """
        )
        self.conn.commit()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            row = self.conn.execute(
                "SELECT value FROM kv_store WHERE key=?", (key,)
            ).fetchone()
        if not row:
            return None
        return str(row["value"])

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self.conn.execute(
                """
                INSERT INTO kv_store (key, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value=excluded.value,
                    updated_at=excluded.updated_at
                """,
                (key, value, float(time.time())),
            )
            self.conn.commit()

    def delete(self, key: str) -> None:
        with self._lock:
            self.conn.execute("DELETE FROM kv_store WHERE key=?", (key,))
            self.conn.commit()


def load_json(store: KeyValueStore, key: str) -> Any:
    """Decode the blob under ``key``; ``None`` when nothing is stored."""
    try:
        raw = store.get(key)
    except sqlite3.Error as exc:
        raise PersistenceError(f"could not read {key}: {exc}") from exc
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise PersistenceError(f"could not decode {key}: {exc}") from exc


def save_json(store: KeyValueStore, key: str, value: Any) -> None:
    try:
        encoded = json.dumps(value, ensure_ascii=False, sort_keys=True)
    except (TypeError, ValueError) as exc:
        raise PersistenceError(f"could not encode {key}: {exc}") from exc
    try:
        store.set(key, encoded)
    except sqlite3.Error as exc:
        raise PersistenceError(f"could not write {key}: {exc}") from exc
