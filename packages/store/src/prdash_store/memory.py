"""In-process cache, the default. Lives as long as the CLI process."""

from __future__ import annotations

import copy
from datetime import datetime, timezone
from typing import Any

from prdash_store.base import BaseCache
from prdash_store.models import CacheEntry


class MemoryCache(BaseCache):
    def __init__(self):
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> CacheEntry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        # Hand out a copy so callers cannot mutate what is cached.
        return CacheEntry(value=copy.deepcopy(entry.value), stored_at=entry.stored_at)

    def put(self, key: str, value: Any) -> None:
        self._entries[key] = CacheEntry(value=copy.deepcopy(value), stored_at=datetime.now(timezone.utc))
