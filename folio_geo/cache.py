"""
Bounded, expiring cache of upstream weather payloads.

Keys are built from endpoint + folded query + units so "Frederick,MD,US" and
"frederick,md,us" share an entry. Entries expire at an absolute time; expired
entries are dropped lazily on read, by sweep(), and before any capacity
eviction. When the cache is still full after a sweep the oldest insertion is
evicted. A single lock serializes every operation, so the cache can be shared
between request handlers and the sweeper thread.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Optional

from folio_geo.config import get_settings
from folio_geo.gazetteer import fold
from folio_geo.models import CacheStats

logger = logging.getLogger(__name__)


def make_cache_key(endpoint: str, query: str, units: str) -> str:
    return f"{endpoint}|{fold(query)}|{units}"


@dataclass
class CacheEntry:
    key: str
    payload: Any
    expires_at: float


class ResponseCache:
    def __init__(
        self,
        max_entries: int = 1000,
        default_ttl: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_entries < 1:
            raise ValueError(f"max_entries must be at least 1, got {max_entries}")
        if default_ttl < 0:
            raise ValueError(f"default_ttl must be non-negative, got {default_ttl}")
        self.max_entries = max_entries
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._expirations = 0

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            if self._clock() >= entry.expires_at:
                del self._entries[key]
                self._expirations += 1
                self._misses += 1
                return None
            self._hits += 1
            return entry.payload

    def set(self, key: str, payload: Any, ttl_seconds: Optional[float] = None) -> None:
        ttl = self.default_ttl if ttl_seconds is None else ttl_seconds
        if ttl < 0:
            raise ValueError(f"ttl_seconds must be non-negative, got {ttl}")

        with self._lock:
            now = self._clock()
            # Re-setting a key refreshes its position as the newest insertion
            self._entries.pop(key, None)
            if len(self._entries) >= self.max_entries:
                self._sweep_locked(now)
            while len(self._entries) >= self.max_entries:
                oldest, _ = self._entries.popitem(last=False)
                self._evictions += 1
                logger.debug("Cache full (%d), evicted %s", self.max_entries, oldest)
            self._entries[key] = CacheEntry(key=key, payload=payload, expires_at=now + ttl)

    def sweep(self) -> int:
        """Drop every expired entry. Returns how many were removed."""
        with self._lock:
            return self._sweep_locked(self._clock())

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                size=len(self._entries),
                max_entries=self.max_entries,
                default_ttl_seconds=self.default_ttl,
                hits=self._hits,
                misses=self._misses,
                evictions=self._evictions,
                expirations=self._expirations,
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _sweep_locked(self, now: float) -> int:
        expired = [k for k, e in self._entries.items() if now >= e.expires_at]
        for key in expired:
            del self._entries[key]
        self._expirations += len(expired)
        return len(expired)


# Process-wide cache sized from settings
@lru_cache(maxsize=1)
def get_cache() -> ResponseCache:
    settings = get_settings().cache
    return ResponseCache(max_entries=settings.max_entries, default_ttl=settings.default_ttl)
