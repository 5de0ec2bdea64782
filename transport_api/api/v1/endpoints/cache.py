"""
Cache monitoring endpoints.

Diagnostics are always available; configuration, key inspection and the
expiration check are only served in development.
"""

import logging

from fastapi import APIRouter, Depends, Request

from transport_api.api.v1.shared.errors import development_only
from transport_api.core.config import Settings, get_settings
from transport_api.models.cache import (
    CacheConfiguration,
    CacheDiagnosticsSnapshot,
    CacheExpirationTest,
    CacheKeyStatus,
)
from transport_api.services.cache import CacheService, get_cache_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/diagnostics",
    response_model=CacheDiagnosticsSnapshot,
    summary="Point-in-time cache health snapshot",
)
async def get_diagnostics(
    cache: CacheService = Depends(get_cache_service),
) -> CacheDiagnosticsSnapshot:
    return cache.get_diagnostics()


@router.get(
    "/config",
    response_model=CacheConfiguration,
    summary="Effective cache configuration (development only)",
)
async def get_cache_config(
    request: Request,
    settings: Settings = Depends(get_settings),
    cache: CacheService = Depends(get_cache_service),
) -> CacheConfiguration:
    if not settings.is_development:
        raise development_only()
    cleanup = getattr(request.app.state, "cache_cleanup", None)
    return CacheConfiguration(
        realtime_cache_seconds=settings.cache_realtime_ttl_seconds,
        static_cache_hours=settings.cache_static_ttl_hours,
        cache_size_limit=settings.cache_size_limit,
        compaction_threshold=settings.cache_compaction_threshold,
        enable_health_check=settings.cache_enable_health_check,
        log_cache_operations=settings.cache_log_operations,
        cleanup_enabled=bool(settings.cache_cleanup_enabled),
        cleanup_interval_minutes=settings.cache_cleanup_interval_minutes,
        cleanup_job=cleanup.get_job_info() if cleanup is not None else None,
        timestamp=cache.store.now(),
    )


@router.get(
    "/keys/{key:path}",
    response_model=CacheKeyStatus,
    summary="Whether a key is currently cached (development only)",
)
async def check_cache_key(
    key: str,
    settings: Settings = Depends(get_settings),
    cache: CacheService = Depends(get_cache_service),
) -> CacheKeyStatus:
    if not settings.is_development:
        raise development_only()
    return CacheKeyStatus(
        key=key,
        exists=await cache.contains(key),
        checked_at=cache.store.now(),
    )


@router.post(
    "/test-expiration/{seconds}",
    response_model=CacheExpirationTest,
    summary="Write a throwaway entry that expires after `seconds` (development only)",
)
async def check_cache_expiration(
    seconds: int,
    settings: Settings = Depends(get_settings),
    cache: CacheService = Depends(get_cache_service),
) -> CacheExpirationTest:
    if not settings.is_development:
        raise development_only()
    now = cache.store.now()
    key = f"test-expiration-{now:%H%M%S}"
    await cache.set(
        key,
        {"message": "Test cache value", "created_at": now.isoformat()},
        seconds,
    )
    logger.info("Set cache key %s with %ss expiration", key, seconds)
    entry = await cache.store.peek(key)
    return CacheExpirationTest(
        key=key,
        expiration_seconds=seconds,
        set_at=now,
        expires_at=entry.expires_at if entry else now,
    )
