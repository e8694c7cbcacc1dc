"""
In-process TTL cache.

Entries expire lazily: an expired entry is dropped the next time it is read.
``cleanup`` sweeps everything that has expired and is run periodically by the
cache scheduler (see ``services.scheduler_service``).
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from config import DEFAULT_CACHE_TTL

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    stored_at: float
    ttl: float

    def is_expired(self, now: float) -> bool:
        return now - self.stored_at > self.ttl


class TTLCache:
    """Key/value store with per-entry time-to-live (seconds)."""

    def __init__(self, default_ttl: float = DEFAULT_CACHE_TTL, clock: Callable[[], float] = time.monotonic):
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        self._entries[key] = CacheEntry(
            value=value,
            stored_at=self._clock(),
            ttl=self.default_ttl if ttl is None else ttl,
        )

    def get(self, key: str, default: Any = None) -> Any:
        """Return the cached value, or ``default`` if missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return default
        if entry.is_expired(self._clock()):
            self._entries.pop(key, None)
            return default
        return entry.value

    def __contains__(self, key: str) -> bool:
        sentinel = object()
        return self.get(key, sentinel) is not sentinel

    def __len__(self) -> int:
        return len(self._entries)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def keys(self) -> List[str]:
        """Point-in-time key list; may still contain expired, unswept keys."""
        return list(self._entries.keys())

    def delete_prefix(self, prefix: str) -> int:
        removed = 0
        for key in self.keys():
            if key.startswith(prefix):
                self.delete(key)
                removed += 1
        return removed

    def cleanup(self) -> int:
        """Remove every expired entry. Returns the number removed."""
        now = self._clock()
        removed = 0
        for key, entry in list(self._entries.items()):
            if entry.is_expired(now):
                # A concurrent set() may have replaced the entry since the snapshot
                if self._entries.get(key) is entry:
                    del self._entries[key]
                    removed += 1
        if removed:
            logger.info(f"Cache cleanup removed {removed} expired entries")
        return removed


# Process-wide cache shared by the GitHub service and the documentation generator
cache = TTLCache()
