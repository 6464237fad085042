"""Abstract cache interface.

Used for payloads that are expensive to recompute upstream (the AI comment
categorization, for example). Expiry is decided by the caller with
is_fresh(), never by the backend: a backend only remembers what was stored
and when.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from prdash_store.models import CacheEntry


class BaseCache(ABC):
    """Pluggable key/value cache with per-entry store timestamps."""

    @abstractmethod
    def get(self, key: str) -> CacheEntry | None:
        """Return the entry stored under key, or None on a miss.

        Unreadable entries count as a miss; never raises.
        """

    @abstractmethod
    def put(self, key: str, value: Any) -> None:
        """Store a JSON-serializable value under key, replacing any previous entry."""

    def close(self) -> None:
        """Release any resources held by the cache (connections, file handles).

        Optional. Subclasses that need cleanup should override this.
        Default is a no-op so callers can always call close() safely.
        """


def is_fresh(entry: CacheEntry | None, ttl: timedelta, now: datetime | None = None) -> bool:
    """Return True if entry exists and is younger than ttl."""
    if entry is None:
        return False
    now = now or datetime.now(timezone.utc)
    return now - entry.stored_at < ttl
