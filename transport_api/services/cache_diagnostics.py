"""Explicit metadata index and snapshot reporting for the in-memory cache.

The index is written alongside every cache write and trimmed through the
store's eviction hook, so diagnostics never need to look inside the store.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from transport_api.models.cache import CacheDiagnosticsSnapshot, CacheEntryInfoModel
from transport_api.services.cache_store import CacheEntry, Clock, utc_now

RECENT_ENTRIES_LIMIT = 20


@dataclass(slots=True)
class CacheEntryInfo:
    """Metadata recorded for one cache write."""

    key: str
    set_at: datetime
    expires_at: datetime
    estimated_size: int
    data_type: str

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now

    @classmethod
    def from_entry(cls, entry: CacheEntry) -> "CacheEntryInfo":
        return cls(
            key=entry.key,
            set_at=entry.created_at,
            expires_at=entry.expires_at,
            estimated_size=entry.estimated_size_bytes,
            data_type=entry.value_type,
        )

    def to_model(self) -> CacheEntryInfoModel:
        return CacheEntryInfoModel(
            key=self.key,
            set_at=self.set_at,
            expires_at=self.expires_at,
            estimated_size=self.estimated_size,
            data_type=self.data_type,
        )


def hit_ratio(hits: int, misses: int) -> float:
    total = hits + misses
    return hits / total if total > 0 else 0.0


class CacheMetadataIndex:
    """Key -> CacheEntryInfo map maintained by the cache service."""

    def __init__(self, clock: Clock = utc_now) -> None:
        self._records: dict[str, CacheEntryInfo] = {}
        self._clock = clock

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, key: object) -> bool:
        return key in self._records

    def record(self, entry: CacheEntry) -> None:
        self._records[entry.key] = CacheEntryInfo.from_entry(entry)

    def discard(self, key: str) -> None:
        self._records.pop(key, None)

    def clear(self) -> None:
        self._records.clear()

    def sweep_expired(self) -> int:
        """Drop records whose expiry has passed. Returns how many were dropped."""
        now = self._clock()
        expired = [key for key, info in list(self._records.items()) if info.is_expired(now)]
        for key in expired:
            self._records.pop(key, None)
        return len(expired)

    def snapshot(
        self,
        *,
        hit_count: int,
        miss_count: int,
        last_compaction: datetime,
        recent_limit: int = RECENT_ENTRIES_LIMIT,
    ) -> CacheDiagnosticsSnapshot:
        """Sweep expired records, then summarize what is left."""
        self.sweep_expired()
        now = self._clock()
        active = [info for info in list(self._records.values()) if not info.is_expired(now)]
        recent = sorted(active, key=lambda info: info.set_at, reverse=True)[:recent_limit]

        return CacheDiagnosticsSnapshot(
            total_entries=len(active),
            estimated_memory_usage=sum(info.estimated_size for info in active),
            hit_count=hit_count,
            miss_count=miss_count,
            total_requests=hit_count + miss_count,
            hit_ratio=hit_ratio(hit_count, miss_count),
            recent_entries=[info.to_model() for info in recent],
            last_compaction=last_compaction,
            generated_at=now,
        )


__all__ = [
    "CacheEntryInfo",
    "CacheMetadataIndex",
    "RECENT_ENTRIES_LIMIT",
    "hit_ratio",
]
