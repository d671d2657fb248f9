"""Bounded, time-expiring keyword -> translation cache."""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .config import CACHE_MAX_ENTRIES, CACHE_TTL
from .utils import normalize_key

logger = logging.getLogger(__name__)

MIN_CAPACITY = 1


@dataclass
class CacheEntry:
    key: str
    value: str
    expires_at: float

    def is_live(self, now: float) -> bool:
        return now < self.expires_at


class TranslationCache:
    """In-memory cache of translated keywords.

    Keys are normalized with :func:`normalize_key`, so ``"Hello"``,
    ``"  hello "`` and ``"HELLO"`` share one entry. Entries expire ``ttl``
    seconds after they were last written and are purged lazily when a lookup
    finds them stale. When the cache is full, writing a new key evicts the
    entry that was inserted first; reads never change that order.

    A single lock guards every operation, so the cache can be shared by
    concurrent requests.
    """

    def __init__(
        self,
        capacity: int = CACHE_MAX_ENTRIES,
        ttl: float = CACHE_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        try:
            capacity = int(capacity)
        except (TypeError, ValueError):
            capacity = MIN_CAPACITY
        self.capacity = max(capacity, MIN_CAPACITY)
        self.ttl = ttl if ttl and ttl > 0 else CACHE_TTL
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, source_text: str) -> Optional[str]:
        key = normalize_key(source_text)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None
            if not entry.is_live(self._clock()):
                del self._entries[key]
                self.misses += 1
                return None
            self.hits += 1
            return entry.value

    def put(self, source_text: str, translated_text: str) -> None:
        key = normalize_key(source_text)
        with self._lock:
            if key not in self._entries and len(self._entries) >= self.capacity:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
                logger.debug("Evicted oldest translation cache entry %r", oldest)
            self._entries[key] = CacheEntry(
                key=key,
                value=translated_text,
                expires_at=self._clock() + self.ttl,
            )

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    def stats(self) -> dict:
        with self._lock:
            return {
                "size": len(self._entries),
                "capacity": self.capacity,
                "ttl_seconds": self.ttl,
                "hits": self.hits,
                "misses": self.misses,
            }

    def __contains__(self, source_text: object) -> bool:
        if not isinstance(source_text, str):
            return False
        key = normalize_key(source_text)
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and entry.is_live(self._clock())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
