"""
Per-session result cache.

Holds intermediate results (extracted catalogs, document extractions) keyed by
file digest so re-running a comparison with another supplier does not re-read
the uploads. Entries expire after a TTL; when the estimated size goes over
budget the oldest entries are evicted until usage is back to 80% of it. A
miss only means the caller recomputes.
"""

from __future__ import annotations

import dataclasses
import hashlib
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

from config.settings import CACHE_MAX_BYTES, CACHE_TTL_SECONDS

logger = logging.getLogger(__name__)

EVICTION_TARGET_RATIO = 0.8


@dataclass
class _CacheEntry:
    value: Any
    timestamp: float
    size: int


@dataclass(frozen=True)
class CacheStats:
    entries: int
    total_size: int
    hits: int
    misses: int

    @property
    def hit_rate(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0


def estimate_size(obj: Any) -> int:
    """Rough byte estimate: 2 bytes per character, 8 per number, recursive for containers."""
    if obj is None:
        return 0
    if isinstance(obj, bool):
        return 4
    if isinstance(obj, (int, float)):
        return 8
    if isinstance(obj, str):
        return len(obj) * 2
    if isinstance(obj, (bytes, bytearray)):
        return len(obj)
    if isinstance(obj, Mapping):
        return sum(estimate_size(k) + estimate_size(v) for k, v in obj.items())
    if isinstance(obj, (list, tuple, set, frozenset)):
        return sum(estimate_size(item) for item in obj)
    if dataclasses.is_dataclass(obj):
        return sum(
            len(f.name) * 2 + estimate_size(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
        )
    return 0


def content_key(prefix: str, data: bytes) -> str:
    return f"{prefix}:{hashlib.sha256(data).hexdigest()}"


class ResultCache:
    def __init__(
        self,
        max_bytes: int = CACHE_MAX_BYTES,
        ttl_seconds: float = CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_bytes = max_bytes
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, _CacheEntry] = {}
        self._hits = 0
        self._misses = 0
        self._closed = False

    def _expired(self, entry: _CacheEntry, now: float) -> bool:
        return now - entry.timestamp > self.ttl_seconds

    def set(self, key: str, value: Any, size: Optional[int] = None) -> None:
        if self._closed:
            raise RuntimeError("ResultCache is closed")
        if size is None:
            size = estimate_size(value)
        # re-setting a key refreshes its position in insertion order
        self._entries.pop(key, None)
        self._entries[key] = _CacheEntry(value, self._clock(), size)
        self.cleanup()

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None
        if self._expired(entry, self._clock()):
            del self._entries[key]
            self._misses += 1
            return None
        self._hits += 1
        return entry.value

    def cleanup(self) -> None:
        """Drop expired entries, then evict oldest-first if over budget."""
        now = self._clock()
        for key in [k for k, e in self._entries.items() if self._expired(e, now)]:
            del self._entries[key]

        total = sum(e.size for e in self._entries.values())
        if total <= self.max_bytes:
            return

        target = self.max_bytes * EVICTION_TARGET_RATIO
        evicted = 0
        for key, entry in sorted(self._entries.items(), key=lambda item: item[1].timestamp):
            del self._entries[key]
            total -= entry.size
            evicted += 1
            if total <= target:
                break
        logger.debug(f"Cache evicted {evicted} entries, {total} bytes left")

    def clear(self) -> None:
        self._entries.clear()

    def stats(self) -> CacheStats:
        return CacheStats(
            entries=len(self._entries),
            total_size=sum(e.size for e in self._entries.values()),
            hits=self._hits,
            misses=self._misses,
        )

    def close(self) -> None:
        self.clear()
        self._closed = True

    def __contains__(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry is not None and not self._expired(entry, self._clock())

    def __len__(self) -> int:
        return len(self._entries)
