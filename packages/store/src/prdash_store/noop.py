"""No-op cache, used when caching is disabled (cache: none).

Using a NoOpCache rather than None lets callers always call cache.get()
and cache.put() without conditional checks.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from prdash_store.base import BaseCache

if TYPE_CHECKING:
    from prdash_store.models import CacheEntry


class NoOpCache(BaseCache):
    """Remembers nothing: every get() is a miss."""

    def get(self, key: str) -> CacheEntry | None:
        return None

    def put(self, key: str, value: Any) -> None:
        pass  # intentional no-op
