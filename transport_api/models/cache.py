"""Pydantic models describing cache state for the monitoring endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class CacheEntryInfoModel(BaseModel):
    """Metadata recorded for a single cache entry."""

    key: str
    set_at: datetime
    expires_at: datetime
    estimated_size: int = Field(..., description="Estimated payload size in bytes")
    data_type: str = Field(..., description="Class name of the cached value")


class CacheDiagnosticsSnapshot(BaseModel):
    """Point-in-time view of cache health. Best effort, not transactional."""

    total_entries: int
    estimated_memory_usage: int = Field(
        ..., description="Sum of estimated sizes of active entries, in bytes"
    )
    hit_count: int
    miss_count: int
    total_requests: int
    hit_ratio: float = Field(..., description="hits / (hits + misses), 0 when idle")
    recent_entries: list[CacheEntryInfoModel] = Field(default_factory=list)
    last_compaction: datetime
    generated_at: datetime


class CacheConfiguration(BaseModel):
    """Effective cache configuration."""

    realtime_cache_seconds: int
    static_cache_hours: int
    cache_size_limit: int
    compaction_threshold: float
    enable_health_check: bool
    log_cache_operations: bool
    cleanup_enabled: bool
    cleanup_interval_minutes: int
    cleanup_job: dict[str, Any] | None = Field(
        None, description="Scheduler state of the cleanup job when it is running"
    )
    timestamp: datetime


class CacheKeyStatus(BaseModel):
    key: str
    exists: bool
    checked_at: datetime


class CacheExpirationTest(BaseModel):
    """Result of writing a throwaway entry with an explicit TTL."""

    key: str
    expiration_seconds: int
    set_at: datetime
    expires_at: datetime
