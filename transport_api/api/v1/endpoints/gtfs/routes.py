"""
Route endpoints backed by the static GTFS archive.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Response

from transport_api.api.v1.shared.cache_headers import set_cache_header
from transport_api.api.v1.shared.dependencies import get_cached_gtfs_service
from transport_api.models.gtfs import RouteShapePoint, RouteSummary
from transport_api.services.cached_gtfs import CachedGtfsService

router = APIRouter()

# Static data changes at most daily.
_STATIC_MAX_AGE_SECONDS = 3600


@router.get(
    "",
    response_model=list[RouteSummary],
    summary="All routes",
)
async def get_all_routes(
    response: Response,
    gtfs: CachedGtfsService = Depends(get_cached_gtfs_service),
) -> list[RouteSummary]:
    routes = await gtfs.get_all_routes()
    set_cache_header(response, _STATIC_MAX_AGE_SECONDS)
    return routes


@router.get(
    "/{route_id}/shape",
    response_model=list[RouteShapePoint],
    summary="Shape points of a route",
)
async def get_route_shape(
    route_id: Annotated[str, Path(min_length=1, max_length=64)],
    response: Response,
    gtfs: CachedGtfsService = Depends(get_cached_gtfs_service),
) -> list[RouteShapePoint]:
    points = await gtfs.get_route_shape(route_id)
    set_cache_header(response, _STATIC_MAX_AGE_SECONDS)
    return points
