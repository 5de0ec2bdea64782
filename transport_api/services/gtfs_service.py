"""
GTFS shaping service.

Turns raw provider data into API models:
- Vehicle positions from the realtime FeedMessage, grouped by route
- Single vehicle lookups
- Routes and route shapes from static archive lines

Raises NoDataAvailableError whenever a successful fetch yields nothing the
caller can use, and UpstreamFetchError when the realtime payload is not a
valid FeedMessage.
"""

from __future__ import annotations

import csv
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Iterable, Protocol

from google.protobuf.message import DecodeError
from google.transit import gtfs_realtime_pb2

from transport_api.models.gtfs import (
    EnhancedVehiclePosition,
    GtfsStaticFile,
    RouteShapePoint,
    RouteSummary,
    VehiclePositionData,
    VehiclePositionsByRoute,
)
from transport_api.services.cache_store import Clock, utc_now
from transport_api.services.gtfs_errors import NoDataAvailableError, UpstreamFetchError

logger = logging.getLogger(__name__)

DEFAULT_ROUTE_TYPE = 3  # bus

RouteLookup = Callable[[str], Awaitable[RouteSummary | None]]


class GtfsDataProvider(Protocol):
    """Anything that can hand out raw realtime bytes and static lines."""

    async def get_realtime_data(self) -> bytes: ...

    async def get_static_file_data(self, static_file: GtfsStaticFile) -> list[str]: ...


def _split(lines: Iterable[str]) -> Iterable[list[str]]:
    return csv.reader(lines)


def _coordinate(value: float) -> str:
    return str(round(value, 6))


def parse_routes(lines: list[str]) -> list[RouteSummary]:
    """Map routes.txt rows: id, agency, short name, long name, desc, type."""
    routes = []
    for parts in _split(lines):
        if not parts:
            continue
        routes.append(
            RouteSummary(
                route_id=parts[0].strip(),
                route_short_name=parts[2].strip() if len(parts) > 2 else "",
                route_long_name=parts[3].strip() if len(parts) > 3 else "",
                route_type=parts[5].strip() if len(parts) > 5 else "",
            )
        )
    return routes


def shape_direction(shape_id: str) -> str:
    """Direction is encoded as the character after the first underscore."""
    _, sep, rest = shape_id.partition("_")
    if not sep or not rest:
        return ""
    return {"1": "outbound", "2": "inbound"}.get(rest[0], "")


def parse_route_shape(lines: list[str], route_id: str) -> list[RouteShapePoint]:
    """Select shapes.txt points whose shape_id starts with ``<route_id>_``."""
    prefix = f"{route_id}_"
    points = []
    for parts in _split(lines):
        if not parts:
            continue
        shape_id = parts[0].strip()
        if not shape_id.startswith(prefix):
            continue
        points.append(
            RouteShapePoint(
                direction=shape_direction(shape_id),
                latitude=parts[1].strip() if len(parts) > 1 else "0.0",
                longitude=parts[2].strip() if len(parts) > 2 else "0.0",
            )
        )
    return points


def parse_feed(payload: bytes) -> gtfs_realtime_pb2.FeedMessage:
    feed = gtfs_realtime_pb2.FeedMessage()
    try:
        feed.ParseFromString(payload)
    except DecodeError as exc:
        raise UpstreamFetchError("Realtime payload is not a valid GTFS-RT feed") from exc
    return feed


class GtfsService:
    """Shapes GTFS data from a ``GtfsDataProvider`` into API models."""

    def __init__(self, data_service: GtfsDataProvider, *, clock: Clock = utc_now) -> None:
        self.data_service = data_service
        self._clock = clock

    # =========================================================================
    # Realtime
    # =========================================================================

    async def get_all_vehicle_positions(self) -> VehiclePositionsByRoute:
        """All current positions as ``{route_id: ["lat,lng", ...]}``."""
        grouped: VehiclePositionsByRoute = {}
        for vehicle in await self._vehicle_positions():
            grouped.setdefault(vehicle.route_id, []).append(
                f"{_coordinate(vehicle.latitude)},{_coordinate(vehicle.longitude)}"
            )
        return grouped

    async def get_vehicle_positions_by_route(
        self, route_id: str
    ) -> VehiclePositionsByRoute:
        positions = await self.get_all_vehicle_positions()
        return {route_id: positions.get(route_id, [])}

    async def get_vehicle_position(self, vehicle_id: str) -> VehiclePositionData:
        for vehicle in await self._vehicle_positions():
            if vehicle.vehicle_id == vehicle_id:
                return vehicle
        raise NoDataAvailableError(f"No current position for vehicle {vehicle_id}.")

    async def get_all_vehicle_positions_enhanced(
        self, route_lookup: RouteLookup | None = None
    ) -> list[EnhancedVehiclePosition]:
        lookup = route_lookup or self.get_route_info
        by_route: dict[str, list[VehiclePositionData]] = {}
        for vehicle in await self._vehicle_positions():
            by_route.setdefault(vehicle.route_id, []).append(vehicle)

        return [
            self._enhance(route_id, vehicles, await lookup(route_id))
            for route_id, vehicles in by_route.items()
        ]

    async def get_vehicle_positions_by_route_enhanced(
        self, route_id: str, route_lookup: RouteLookup | None = None
    ) -> EnhancedVehiclePosition:
        lookup = route_lookup or self.get_route_info
        vehicles = [v for v in await self._vehicle_positions() if v.route_id == route_id]
        if not vehicles:
            raise NoDataAvailableError(f"No current position found for route {route_id}.")
        return self._enhance(route_id, vehicles, await lookup(route_id))

    # =========================================================================
    # Static
    # =========================================================================

    async def get_static_file_data(self, static_file: GtfsStaticFile) -> list[str]:
        lines = await self.data_service.get_static_file_data(static_file)
        if not lines:
            raise NoDataAvailableError(f"No data available in the file {static_file.file_name}.")
        return lines

    async def get_all_routes(self) -> list[RouteSummary]:
        routes = parse_routes(await self.get_static_file_data(GtfsStaticFile.ROUTES))
        if not routes:
            raise NoDataAvailableError("No route data available.")
        return routes

    async def get_route_info(self, route_id: str) -> RouteSummary | None:
        for route in await self.get_all_routes():
            if route.route_id == route_id:
                return route
        return None

    async def get_route_shape(self, route_id: str) -> list[RouteShapePoint]:
        lines = await self.get_static_file_data(GtfsStaticFile.SHAPES)
        points = parse_route_shape(lines, route_id)
        if not points:
            raise NoDataAvailableError(f"No shape data available for route {route_id}.")
        return points

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _vehicle_positions(self) -> list[VehiclePositionData]:
        feed = parse_feed(await self.data_service.get_realtime_data())
        vehicles = [
            self._map_vehicle(entity)
            for entity in feed.entity
            if entity.HasField("vehicle")
            and entity.vehicle.HasField("position")
            and entity.vehicle.trip.route_id
        ]
        if not vehicles:
            raise NoDataAvailableError("No vehicle positions available in the realtime data.")
        logger.debug(
            "Parsed %s vehicle positions from %s feed entities",
            len(vehicles),
            len(feed.entity),
        )
        return vehicles

    def _map_vehicle(self, entity) -> VehiclePositionData:
        v = entity.vehicle
        last_update = (
            datetime.fromtimestamp(v.timestamp, timezone.utc)
            if v.HasField("timestamp")
            else self._clock()
        )
        return VehiclePositionData(
            latitude=v.position.latitude,
            longitude=v.position.longitude,
            vehicle_id=v.vehicle.id or entity.id,
            route_id=v.trip.route_id,
            trip_id=v.trip.trip_id,
            last_update=last_update,
            speed=v.position.speed if v.position.HasField("speed") else None,
            bearing=v.position.bearing if v.position.HasField("bearing") else None,
        )

    @staticmethod
    def _enhance(
        route_id: str,
        vehicles: list[VehiclePositionData],
        route: RouteSummary | None,
    ) -> EnhancedVehiclePosition:
        route_type = DEFAULT_ROUTE_TYPE
        if route is not None and route.route_type.isdigit():
            route_type = int(route.route_type)
        return EnhancedVehiclePosition(
            route_id=route_id,
            route_short_name=route.route_short_name if route else route_id,
            route_long_name=route.route_long_name if route else "",
            route_type=route_type,
            vehicles=vehicles,
        )


__all__ = [
    "GtfsDataProvider",
    "GtfsService",
    "parse_feed",
    "parse_route_shape",
    "parse_routes",
    "shape_direction",
]
