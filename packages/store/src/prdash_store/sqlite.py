"""SQLiteCache: file-backed cache that survives between CLI runs.

Plays the role the browser's local storage plays for the web dashboard:
AI analytics fetched once are reused by later runs until the caller decides
they are stale.

Schema:
  cache_entries: one row per key; values are JSON text, stored_at is an
                 ISO-8601 UTC timestamp.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime, timezone
from typing import Any

from prdash_store.base import BaseCache
from prdash_store.models import CacheEntry

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS cache_entries (
    key         TEXT PRIMARY KEY,
    value_json  TEXT NOT NULL,
    stored_at   TEXT NOT NULL
);
"""


class SQLiteCache(BaseCache):
    """Stores cache entries in a local SQLite database file.

    The database file path defaults to `.prdash-cache.db` in the current
    working directory. Configure via .prdash.yml: `cache_path: /path/to/cache.db`.
    """

    def __init__(self, db_path: str = ".prdash-cache.db"):
        self._conn = sqlite3.connect(db_path)
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(_SCHEMA)
        self._conn.commit()

    def get(self, key: str) -> CacheEntry | None:
        row = self._conn.execute(
            "SELECT value_json, stored_at FROM cache_entries WHERE key=?",
            (key,),
        ).fetchone()
        if row is None:
            return None
        try:
            value = json.loads(row["value_json"])
            stored_at = datetime.fromisoformat(row["stored_at"])
        except ValueError as e:
            logger.warning("Discarding unreadable cache entry %r: %s", key, e)
            return None
        if stored_at.tzinfo is None:
            stored_at = stored_at.replace(tzinfo=timezone.utc)
        return CacheEntry(value=value, stored_at=stored_at)

    def put(self, key: str, value: Any) -> None:
        self._conn.execute(
            """
            INSERT INTO cache_entries (key, value_json, stored_at)
            VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET
              value_json = excluded.value_json,
              stored_at  = excluded.stored_at
            """,
            (key, json.dumps(value), datetime.now(timezone.utc).isoformat()),
        )
        self._conn.commit()

    def close(self) -> None:
        self._conn.close()
