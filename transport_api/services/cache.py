"""
Cache service for GTFS data.

Provides an in-process cache with:
- Per-entry TTL with lazy expiry on read
- Size-bounded capacity with compaction (expired first, then oldest writes)
- Hit/miss accounting and an explicit metadata index for diagnostics
- Get-or-populate for the caching service wrappers

Get-or-populate is not single-flighted: concurrent misses on the
same key each run their populate function and the last write wins.
"""

from __future__ import annotations

import logging
import math
import time
from datetime import timedelta
from functools import lru_cache
from typing import Any, Awaitable, Callable, TypeVar

from transport_api.core.config import Settings, get_settings
from transport_api.core.metrics import (
    observe_cache_refresh,
    record_cache_event,
    record_cache_eviction,
    set_cache_size_units,
)
from transport_api.models.cache import CacheDiagnosticsSnapshot
from transport_api.services.cache_diagnostics import (
    RECENT_ENTRIES_LIMIT,
    CacheMetadataIndex,
)
from transport_api.services.cache_store import (
    CacheEntry,
    Clock,
    EvictionReason,
    InMemoryStore,
    utc_now,
)
from transport_api.services.gtfs_errors import InvalidCacheArgumentError

logger = logging.getLogger(__name__)
T = TypeVar("T")

TTL = timedelta | int | float


# =============================================================================
# TTL Configuration
# =============================================================================


class TTLConfig:
    """Centralized TTL configuration with validation."""

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()

        self.realtime_ttl = settings.realtime_cache_ttl
        self.static_ttl = settings.static_cache_ttl

        self._validate_ttls()

    def _validate_ttls(self) -> None:
        """Validate that all TTL values are positive."""
        for attr_name, value in self.__dict__.items():
            if "ttl" in attr_name and value <= timedelta(0):
                raise InvalidCacheArgumentError(
                    f"TTL value for {attr_name} must be positive: {value}"
                )

    @staticmethod
    def normalize(ttl: TTL) -> timedelta:
        """Coerce a TTL to a timedelta, rejecting zero and negative values."""
        if isinstance(ttl, bool) or not isinstance(ttl, (timedelta, int, float)):
            raise InvalidCacheArgumentError(f"Unsupported TTL type: {type(ttl).__name__}")
        if isinstance(ttl, float) and not math.isfinite(ttl):
            raise InvalidCacheArgumentError(f"TTL must be finite, got {ttl}")
        try:
            duration = ttl if isinstance(ttl, timedelta) else timedelta(seconds=ttl)
        except OverflowError as exc:
            raise InvalidCacheArgumentError(f"TTL out of range: {ttl}") from exc
        if duration <= timedelta(0):
            raise InvalidCacheArgumentError(f"TTL must be positive, got {duration}")
        return duration


# =============================================================================
# Cache Service
# =============================================================================


class CacheService:
    """In-memory cache with TTL expiry, capacity compaction and diagnostics."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        clock: Clock = utc_now,
    ) -> None:
        settings = settings or get_settings()
        self._log_operations = settings.cache_log_operations
        self._metadata = CacheMetadataIndex(clock=clock)
        self._store = InMemoryStore(
            size_limit=settings.cache_size_limit,
            compaction_threshold=settings.cache_compaction_threshold,
            clock=clock,
            on_evict=self._handle_eviction,
        )

    @property
    def store(self) -> InMemoryStore:
        return self._store

    @property
    def hit_count(self) -> int:
        return self._store.hit_count

    @property
    def miss_count(self) -> int:
        return self._store.miss_count

    async def get(self, key: str) -> Any | None:
        """Return the cached value, or None if missing, expired or evicted."""
        entry = await self._lookup(key)
        return entry.value if entry is not None else None

    async def set(self, key: str, value: Any, ttl: TTL) -> None:
        """Store ``value`` under ``key`` for ``ttl`` (timedelta or seconds)."""
        duration = TTLConfig.normalize(ttl)
        try:
            entry = CacheEntry.build(key, value, self._store.now(), duration)
        except OverflowError as exc:
            raise InvalidCacheArgumentError(f"TTL out of range: {duration}") from exc

        stored = await self._store.set(entry)
        set_cache_size_units(self._store.used_units)
        if not stored:
            return
        self._metadata.record(entry)

        if self._log_operations:
            logger.debug(
                "Cache SET - Key: %s, Expires in: %s, Size: %sKB, Type: %s",
                key,
                duration,
                entry.estimated_size_bytes // 1024,
                entry.value_type,
            )
        else:
            logger.info("Cached item with key: %s, expires in: %s", key, duration)

    async def remove(self, key: str) -> None:
        """Delete ``key`` if present."""
        await self._store.delete(key)
        set_cache_size_units(self._store.used_units)
        if self._log_operations:
            logger.debug("Cache REMOVE - Key: %s", key)

    async def get_or_populate(
        self,
        key: str,
        populate: Callable[[], Awaitable[T]],
        ttl: TTL,
        *,
        cache_name: str = "memory",
    ) -> T:
        """Return the cached value for ``key`` or populate it on a miss.

        ``populate`` runs outside any lock and its exceptions propagate
        untouched; nothing is cached when it fails.
        """
        entry = await self._lookup(key, cache_name=cache_name)
        if entry is not None:
            return entry.value

        started = time.perf_counter()
        value = await populate()
        observe_cache_refresh(cache_name, time.perf_counter() - started)

        await self.set(key, value, ttl)
        return value

    async def contains(self, key: str) -> bool:
        """Check for a live entry without touching the hit/miss counters."""
        return await self._store.peek(key) is not None

    async def compact(self) -> int:
        """Run a compaction pass and return the number of entries dropped."""
        removed = await self._store.compact()
        set_cache_size_units(self._store.used_units)
        return removed

    async def clear(self) -> None:
        removed = await self._store.clear()
        self._metadata.clear()
        set_cache_size_units(0)
        logger.info("Cache cleared, %s entries dropped", removed)

    def get_diagnostics(
        self, recent_limit: int = RECENT_ENTRIES_LIMIT
    ) -> CacheDiagnosticsSnapshot:
        """Snapshot of cache health; sweeps expired metadata first."""
        return self._metadata.snapshot(
            hit_count=self._store.hit_count,
            miss_count=self._store.miss_count,
            last_compaction=self._store.last_compaction_at,
            recent_limit=recent_limit,
        )

    async def _lookup(self, key: str, cache_name: str = "memory") -> CacheEntry | None:
        entry = await self._store.get(key)
        if entry is None:
            record_cache_event(cache_name, "miss")
            if self._log_operations:
                logger.debug("Cache MISS for key: %s", key)
            return None

        record_cache_event(cache_name, "hit")
        if self._log_operations:
            logger.debug("Cache HIT for key: %s, Type: %s", key, entry.value_type)
        return entry

    def _handle_eviction(self, entry: CacheEntry, reason: EvictionReason) -> None:
        self._metadata.discard(entry.key)
        record_cache_eviction(reason.value)
        if self._log_operations:
            logger.debug(
                "Cache item evicted - Key: %s, Reason: %s, Type: %s",
                entry.key,
                reason.value,
                entry.value_type,
            )


# =============================================================================
# Factory Functions
# =============================================================================


@lru_cache
def get_cache_service() -> CacheService:
    """Shared process-wide cache; FastAPI dependency hook."""
    return CacheService(get_settings())


__all__ = ["CacheService", "TTLConfig", "get_cache_service"]
