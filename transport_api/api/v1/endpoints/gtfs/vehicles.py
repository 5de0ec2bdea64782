"""
Vehicle position endpoints.

Every response is served from the realtime cache and carries an ETag so
clients polling faster than the cache TTL get 304s.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Request, Response

from transport_api.api.v1.shared.cache_headers import realtime_response
from transport_api.api.v1.shared.dependencies import get_cached_gtfs_service
from transport_api.models.gtfs import (
    EnhancedVehiclePosition,
    VehiclePositionData,
    VehiclePositionsByRoute,
)
from transport_api.services.cached_gtfs import CachedGtfsService

router = APIRouter()

RouteId = Annotated[str, Path(min_length=1, max_length=64, description="GTFS route_id")]


@router.get(
    "",
    response_model=VehiclePositionsByRoute,
    summary="Current positions of all vehicles, grouped by route",
)
async def get_current_positions(
    request: Request,
    gtfs: CachedGtfsService = Depends(get_cached_gtfs_service),
) -> Response:
    return realtime_response(request, await gtfs.get_all_vehicle_positions())


@router.get(
    "/enhanced",
    response_model=list[EnhancedVehiclePosition],
    summary="Current positions of all vehicles with route metadata",
)
async def get_current_positions_enhanced(
    request: Request,
    gtfs: CachedGtfsService = Depends(get_cached_gtfs_service),
) -> Response:
    return realtime_response(request, await gtfs.get_all_vehicle_positions_enhanced())


@router.get(
    "/route/{route_id}",
    response_model=VehiclePositionsByRoute,
    summary="Current positions of the vehicles on one route",
)
async def get_positions_by_route(
    request: Request,
    route_id: RouteId,
    gtfs: CachedGtfsService = Depends(get_cached_gtfs_service),
) -> Response:
    return realtime_response(
        request, await gtfs.get_vehicle_positions_by_route(route_id)
    )


@router.get(
    "/route/{route_id}/enhanced",
    response_model=EnhancedVehiclePosition,
    summary="Current positions on one route with route metadata",
)
async def get_positions_by_route_enhanced(
    request: Request,
    route_id: RouteId,
    gtfs: CachedGtfsService = Depends(get_cached_gtfs_service),
) -> Response:
    return realtime_response(
        request, await gtfs.get_vehicle_positions_by_route_enhanced(route_id)
    )


@router.get(
    "/{vehicle_id}",
    response_model=VehiclePositionData,
    summary="Current position of a single vehicle",
)
async def get_vehicle_position(
    request: Request,
    vehicle_id: Annotated[str, Path(min_length=1, max_length=64)],
    gtfs: CachedGtfsService = Depends(get_cached_gtfs_service),
) -> Response:
    return realtime_response(request, await gtfs.get_vehicle_position(vehicle_id))
