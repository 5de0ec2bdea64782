"""
Caching wrappers around the GTFS data and shaping services.

Every cached call goes through ``CacheService.get_or_populate``. Realtime
results use the short TTL and date-free keys; static and shape results use
the long TTL and keys stamped with the current UTC date. Raw realtime bytes
are never cached.
"""

from __future__ import annotations

import logging

from transport_api.models.gtfs import (
    EnhancedVehiclePosition,
    GtfsStaticFile,
    RouteShapePoint,
    RouteSummary,
    VehiclePositionData,
    VehiclePositionsByRoute,
)
from transport_api.services import cache_keys
from transport_api.services.cache import CacheService, TTLConfig
from transport_api.services.gtfs_errors import NoDataAvailableError
from transport_api.services.gtfs_service import GtfsDataProvider, GtfsService

logger = logging.getLogger(__name__)

REALTIME_CACHE = "gtfs_realtime"
STATIC_CACHE = "gtfs_static"
SHAPE_CACHE = "gtfs_shape"


class CachedGtfsDataService:
    """Caches static archive lines per member and day; realtime passes through."""

    def __init__(
        self,
        inner: GtfsDataProvider,
        cache: CacheService,
        ttl_config: TTLConfig | None = None,
    ) -> None:
        self._inner = inner
        self._cache = cache
        self._ttl = ttl_config or TTLConfig()

    async def get_realtime_data(self) -> bytes:
        return await self._inner.get_realtime_data()

    async def get_static_file_data(self, static_file: GtfsStaticFile) -> list[str]:
        async def populate() -> list[str]:
            lines = await self._inner.get_static_file_data(static_file)
            if not lines:
                raise NoDataAvailableError(
                    f"No data available in the file {static_file.file_name}."
                )
            return lines

        key = cache_keys.static_file_key(static_file, self._cache.store.now())
        return await self._cache.get_or_populate(
            key, populate, self._ttl.static_ttl, cache_name=STATIC_CACHE
        )


class CachedGtfsService:
    """Cache-fronted ``GtfsService`` used by the API layer."""

    def __init__(
        self,
        inner: GtfsService,
        cache: CacheService,
        ttl_config: TTLConfig | None = None,
    ) -> None:
        self._inner = inner
        self._cache = cache
        self._ttl = ttl_config or TTLConfig()

    def _today(self):
        return self._cache.store.now()

    # =========================================================================
    # Realtime (short TTL, no date in key)
    # =========================================================================

    async def get_all_vehicle_positions(self) -> VehiclePositionsByRoute:
        return await self._cache.get_or_populate(
            cache_keys.all_vehicles_key(),
            self._inner.get_all_vehicle_positions,
            self._ttl.realtime_ttl,
            cache_name=REALTIME_CACHE,
        )

    async def get_vehicle_position(self, vehicle_id: str) -> VehiclePositionData:
        return await self._cache.get_or_populate(
            cache_keys.vehicle_key(vehicle_id),
            lambda: self._inner.get_vehicle_position(vehicle_id),
            self._ttl.realtime_ttl,
            cache_name=REALTIME_CACHE,
        )

    async def get_vehicle_positions_by_route(
        self, route_id: str
    ) -> VehiclePositionsByRoute:
        return await self._cache.get_or_populate(
            cache_keys.vehicles_by_route_key(route_id),
            lambda: self._inner.get_vehicle_positions_by_route(route_id),
            self._ttl.realtime_ttl,
            cache_name=REALTIME_CACHE,
        )

    async def get_all_vehicle_positions_enhanced(self) -> list[EnhancedVehiclePosition]:
        return await self._cache.get_or_populate(
            cache_keys.all_vehicles_enhanced_key(),
            lambda: self._inner.get_all_vehicle_positions_enhanced(
                route_lookup=self.get_route_info
            ),
            self._ttl.realtime_ttl,
            cache_name=REALTIME_CACHE,
        )

    async def get_vehicle_positions_by_route_enhanced(
        self, route_id: str
    ) -> EnhancedVehiclePosition:
        return await self._cache.get_or_populate(
            cache_keys.vehicles_by_route_enhanced_key(route_id),
            lambda: self._inner.get_vehicle_positions_by_route_enhanced(
                route_id, route_lookup=self.get_route_info
            ),
            self._ttl.realtime_ttl,
            cache_name=REALTIME_CACHE,
        )

    # =========================================================================
    # Static (long TTL, keys rotate daily)
    # =========================================================================

    async def get_all_routes(self) -> list[RouteSummary]:
        return await self._cache.get_or_populate(
            cache_keys.all_routes_key(self._today()),
            self._inner.get_all_routes,
            self._ttl.static_ttl,
            cache_name=STATIC_CACHE,
        )

    async def get_route_info(self, route_id: str) -> RouteSummary | None:
        """Route metadata for enhanced positions.

        Unknown routes resolve to None and are not cached, so a route added
        later in the day is picked up on the next request.
        """
        key = cache_keys.route_info_key(route_id, self._today())
        cached = await self._cache.get(key)
        if cached is not None:
            return cached

        try:
            routes = await self.get_all_routes()
        except NoDataAvailableError:
            logger.warning("No route metadata available for route %s", route_id)
            return None

        route = next((r for r in routes if r.route_id == route_id), None)
        if route is not None:
            await self._cache.set(key, route, self._ttl.static_ttl)
        return route

    async def get_route_shape(self, route_id: str) -> list[RouteShapePoint]:
        return await self._cache.get_or_populate(
            cache_keys.route_shape_key(route_id, self._today()),
            lambda: self._inner.get_route_shape(route_id),
            self._ttl.static_ttl,
            cache_name=SHAPE_CACHE,
        )

    async def get_static_file_data(self, static_file: GtfsStaticFile) -> list[str]:
        # Member lines are cached by CachedGtfsDataService underneath.
        return await self._inner.get_static_file_data(static_file)


__all__ = ["CachedGtfsDataService", "CachedGtfsService"]
