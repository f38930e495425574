from __future__ import annotations

import logging
import sqlite3
import threading
import time
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS kv (
    key        TEXT PRIMARY KEY,
    value      TEXT NOT NULL,
    expires_at REAL NOT NULL
)
"""


class SqliteKeyValueStore:
    """
    File-backed store so the latest snapshot survives restarts.
    Writes replace the whole value for a key; the last writer wins.
    """

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path)
        if str(db_path) != ":memory:":
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        # Calls arrive from worker threads; one connection, one caller at a time.
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(str(db_path), check_same_thread=False)
        with self._conn:
            self._conn.execute(_SCHEMA)
        logger.debug("Opened key-value store at %s", self.db_path)

    def get(self, key: str) -> Optional[str]:
        now = time.time()
        with self._lock, self._conn:
            row = self._conn.execute(
                "SELECT value, expires_at FROM kv WHERE key = ?", (key,)
            ).fetchone()
            if row is None:
                return None
            value, expires_at = row
            if now >= expires_at:
                self._conn.execute("DELETE FROM kv WHERE key = ?", (key,))
                logger.debug("Key %r expired", key)
                return None
            return value

    def put(self, key: str, value: str, ttl_seconds: float) -> None:
        with self._lock, self._conn:
            self._conn.execute(
                "INSERT INTO kv (key, value, expires_at) VALUES (?, ?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value, expires_at = excluded.expires_at",
                (key, value, time.time() + ttl_seconds),
            )

    def close(self) -> None:
        self._conn.close()
