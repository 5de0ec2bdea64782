"""
GTFS Pydantic models.

These models provide the API response schema for GTFS static and realtime
data, plus the enumeration of static archive members the API can serve.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class GtfsStaticFile(str, Enum):
    """Members of the GTFS static zip archive."""

    AGENCY = "agency"
    STOPS = "stops"
    ROUTES = "routes"
    TRIPS = "trips"
    STOP_TIMES = "stop_times"
    CALENDAR = "calendar"
    CALENDAR_DATES = "calendar_dates"
    FARE_ATTRIBUTES = "fare_attributes"
    FARE_RULES = "fare_rules"
    SHAPES = "shapes"
    FREQUENCIES = "frequencies"
    TRANSFERS = "transfers"
    PATHWAYS = "pathways"
    LEVELS = "levels"
    FEED_INFO = "feed_info"

    @property
    def file_name(self) -> str:
        return f"{self.value}.txt"


# route_id -> ["lat,lng", ...]
VehiclePositionsByRoute = dict[str, list[str]]


class RouteSummary(BaseModel):
    """A route parsed from routes.txt."""

    route_id: str = Field(..., description="GTFS route_id")
    route_short_name: str = Field("", description="Route short name")
    route_long_name: str = Field("", description="Route long name")
    route_type: str = Field("", description="Raw GTFS route_type value")


class RouteShapePoint(BaseModel):
    """A single point of a route shape."""

    direction: str = Field("", description="'outbound', 'inbound' or empty")
    latitude: str = Field("0.0", description="shape_pt_lat as published")
    longitude: str = Field("0.0", description="shape_pt_lon as published")


class VehiclePositionData(BaseModel):
    """Current position of one vehicle."""

    latitude: float
    longitude: float
    vehicle_id: str = ""
    route_id: str = ""
    trip_id: str = ""
    last_update: datetime | None = None
    speed: float | None = None
    bearing: float | None = None


class EnhancedVehiclePosition(BaseModel):
    """Vehicles of one route with route metadata attached."""

    route_id: str
    route_short_name: str = ""
    route_long_name: str = ""
    route_type: int = Field(3, description="GTFS route_type, defaults to bus")
    vehicles: list[VehiclePositionData] = Field(default_factory=list)


class StaticFileResponse(BaseModel):
    file: GtfsStaticFile
    line_count: int
    lines: list[str]
