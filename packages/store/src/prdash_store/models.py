"""Cache entry model.

Decoupled from prdash_core so the store layer can be used independently
and prdash_core has no knowledge of persistence concerns.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class CacheEntry:
    """A cached JSON-serializable value and the time it was stored."""

    value: Any
    stored_at: datetime  # aware, UTC
