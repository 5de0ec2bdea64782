"""
Shared dependency injection functions for API endpoints.
"""

from functools import lru_cache

from fastapi import Depends, Request

from transport_api.services.cache import CacheService, TTLConfig, get_cache_service
from transport_api.services.cached_gtfs import CachedGtfsDataService, CachedGtfsService
from transport_api.services.gtfs_data import GtfsDataService
from transport_api.services.gtfs_service import GtfsService


def get_gtfs_data_service(request: Request) -> GtfsDataService:
    """Upstream client owned by the application lifespan."""
    return request.app.state.gtfs_data_service


@lru_cache
def get_ttl_config() -> TTLConfig:
    return TTLConfig()


def get_cached_gtfs_service(
    cache: CacheService = Depends(get_cache_service),
    data_service: GtfsDataService = Depends(get_gtfs_data_service),
    ttl_config: TTLConfig = Depends(get_ttl_config),
) -> CachedGtfsService:
    """Create CachedGtfsService with dependencies."""
    cached_data = CachedGtfsDataService(data_service, cache, ttl_config)
    inner = GtfsService(cached_data, clock=cache.store.now)
    return CachedGtfsService(inner, cache, ttl_config)
