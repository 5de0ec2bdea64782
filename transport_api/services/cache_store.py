"""In-memory TTL store backing the cache service.

Entries are kept in set order so capacity compaction can drop the oldest
writes first. Expired entries are purged lazily on read and in bulk whenever
a compaction pass runs.
"""

from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

# Bytes per abstract size unit counted against the store capacity.
SIZE_UNIT_BYTES = 1000
DEFAULT_ENTRY_SIZE_BYTES = 1000


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class EvictionReason(str, Enum):
    """Why an entry left the store."""

    EXPIRED = "expired"
    CAPACITY = "capacity"
    REMOVED = "removed"
    REPLACED = "replaced"
    CLEARED = "cleared"


def estimate_size(value: Any) -> int:
    """Rough byte estimate for a cached payload.

    Collections are charged per element, text per character, raw bytes by
    length, and everything else a flat default.
    """
    if isinstance(value, str):
        return max(100, len(value) * 2)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return len(value)
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        return max(1000, len(value) * 100)
    return DEFAULT_ENTRY_SIZE_BYTES


@dataclass(slots=True)
class CacheEntry:
    """A stored value together with the metadata recorded at write time."""

    key: str
    value: Any
    created_at: datetime
    expires_at: datetime
    estimated_size_bytes: int
    size_units: int
    value_type: str

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now

    @classmethod
    def build(cls, key: str, value: Any, now: datetime, ttl: timedelta) -> "CacheEntry":
        try:
            estimated = estimate_size(value)
        except Exception:
            # Size only feeds capacity accounting; never fail the write over it.
            logger.exception("Size estimation failed for cache key %s", key)
            estimated = DEFAULT_ENTRY_SIZE_BYTES
        return cls(
            key=key,
            value=value,
            created_at=now,
            expires_at=now + ttl,
            estimated_size_bytes=estimated,
            size_units=max(1, estimated // SIZE_UNIT_BYTES),
            value_type=type(value).__name__,
        )


EvictionHook = Callable[[CacheEntry, EvictionReason], None]


class InMemoryStore:
    """
    Size-bounded in-memory store with per-entry expiry.

    Capacity is counted in abstract size units. When a write would push usage
    over ``size_limit`` the store compacts: expired entries go first, then the
    oldest writes, until usage (including the incoming entry) is at or below
    ``size_limit * (1 - compaction_threshold)``.

    All mutation happens under one asyncio lock; the lock is never held across
    any other await.
    """

    def __init__(
        self,
        size_limit: int = 100,
        compaction_threshold: float = 0.25,
        *,
        clock: Clock = utc_now,
        on_evict: EvictionHook | None = None,
    ) -> None:
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = asyncio.Lock()
        self._size_limit = size_limit
        self._compaction_threshold = compaction_threshold
        self._clock = clock
        self._on_evict = on_evict
        self._used_units = 0

        self.hit_count = 0
        self.miss_count = 0
        # Moves only when a capacity eviction happens.
        self.last_compaction_at = clock()

    @property
    def size_limit(self) -> int:
        return self._size_limit

    @property
    def compaction_target(self) -> int:
        return int(self._size_limit * (1 - self._compaction_threshold))

    @property
    def used_units(self) -> int:
        return self._used_units

    def __len__(self) -> int:
        return len(self._entries)

    def now(self) -> datetime:
        return self._clock()

    async def get(self, key: str) -> CacheEntry | None:
        """Return the live entry for ``key`` and count the hit or miss."""
        async with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                self.miss_count += 1
            else:
                self.hit_count += 1
            return entry

    async def peek(self, key: str) -> CacheEntry | None:
        """Like ``get`` but leaves the hit/miss counters alone."""
        async with self._lock:
            return self._live_entry(key)

    async def set(self, entry: CacheEntry) -> bool:
        """Insert or replace an entry. Returns False if it cannot fit at all."""
        async with self._lock:
            previous = self._entries.pop(entry.key, None)
            if previous is not None:
                self._used_units -= previous.size_units
                self._notify(previous, EvictionReason.REPLACED)

            if entry.size_units > self._size_limit:
                logger.warning(
                    "Cache entry %s needs %s units, above capacity %s; not stored",
                    entry.key,
                    entry.size_units,
                    self._size_limit,
                )
                return False

            if self._used_units + entry.size_units > self._size_limit:
                self._compact_locked(incoming_units=entry.size_units)

            self._entries[entry.key] = entry
            self._used_units += entry.size_units
            return True

    async def delete(self, key: str) -> bool:
        """Delete an entry; missing keys are not an error."""
        async with self._lock:
            entry = self._entries.pop(key, None)
            if entry is None:
                return False
            self._used_units -= entry.size_units
            self._notify(entry, EvictionReason.REMOVED)
            return True

    async def compact(self) -> int:
        """Purge expired entries and shrink to the compaction target if needed."""
        async with self._lock:
            return self._compact_locked(incoming_units=0)

    async def clear(self) -> int:
        async with self._lock:
            entries = list(self._entries.values())
            self._entries.clear()
            self._used_units = 0
            for entry in entries:
                self._notify(entry, EvictionReason.CLEARED)
            return len(entries)

    def _live_entry(self, key: str) -> CacheEntry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._entries[key]
            self._used_units -= entry.size_units
            self._notify(entry, EvictionReason.EXPIRED)
            return None
        return entry

    def _purge_expired_locked(self, now: datetime) -> int:
        expired = [entry for entry in self._entries.values() if entry.is_expired(now)]
        for entry in expired:
            del self._entries[entry.key]
            self._used_units -= entry.size_units
            self._notify(entry, EvictionReason.EXPIRED)
        return len(expired)

    def _compact_locked(self, incoming_units: int) -> int:
        now = self._clock()
        removed = self._purge_expired_locked(now)
        target = self.compaction_target
        while self._entries and self._used_units + incoming_units > target:
            _, oldest = self._entries.popitem(last=False)
            self._used_units -= oldest.size_units
            self._notify(oldest, EvictionReason.CAPACITY)
            self.last_compaction_at = now
            removed += 1
        return removed

    def _notify(self, entry: CacheEntry, reason: EvictionReason) -> None:
        if self._on_evict is None:
            return
        try:
            self._on_evict(entry, reason)
        except Exception:
            logger.exception("Eviction hook failed for cache key %s", entry.key)


__all__ = [
    "CacheEntry",
    "Clock",
    "EvictionReason",
    "InMemoryStore",
    "estimate_size",
    "utc_now",
]
