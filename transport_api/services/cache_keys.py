"""
Cache key generation for GTFS data.

Realtime keys carry no date and rely on TTL alone. Static and shape keys end
with the current UTC date, so they roll over at midnight UTC even when the
entry's TTL has not run out yet.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

from transport_api.models.gtfs import GtfsStaticFile
from transport_api.services.gtfs_errors import InvalidCacheArgumentError

REALTIME_NAMESPACE = "realtime"
STATIC_NAMESPACE = "static"
SHAPE_NAMESPACE = "shape"


def utc_date_stamp(day: date | datetime | None = None) -> str:
    """Return ``YYYY-MM-DD`` for ``day`` (or now), taken in UTC."""
    if day is None:
        day = datetime.now(timezone.utc)
    if isinstance(day, datetime):
        if day.tzinfo is not None:
            day = day.astimezone(timezone.utc)
        day = day.date()
    return day.isoformat()


def _identifier(value: str, label: str) -> str:
    normalized = value.strip() if isinstance(value, str) else ""
    if not normalized:
        raise InvalidCacheArgumentError(f"{label} must not be empty")
    return normalized


# =============================================================================
# Realtime keys
# =============================================================================


def all_vehicles_key() -> str:
    return f"{REALTIME_NAMESPACE}:all-vehicles"


def all_vehicles_enhanced_key() -> str:
    return f"{REALTIME_NAMESPACE}:all-vehicles-enhanced"


def vehicle_key(vehicle_id: str) -> str:
    return f"{REALTIME_NAMESPACE}:vehicle:{_identifier(vehicle_id, 'Vehicle ID')}"


def vehicles_by_route_key(route_id: str) -> str:
    return f"{REALTIME_NAMESPACE}:route:{_identifier(route_id, 'Route ID')}"


def vehicles_by_route_enhanced_key(route_id: str) -> str:
    return f"{REALTIME_NAMESPACE}:route-enhanced:{_identifier(route_id, 'Route ID')}"


# =============================================================================
# Static keys (rotate daily)
# =============================================================================


def all_routes_key(day: date | datetime | None = None) -> str:
    return f"{STATIC_NAMESPACE}:routes:{utc_date_stamp(day)}"


def route_info_key(route_id: str, day: date | datetime | None = None) -> str:
    route_id = _identifier(route_id, "Route ID")
    return f"{STATIC_NAMESPACE}:route-info:{route_id}:{utc_date_stamp(day)}"


def static_file_key(
    static_file: GtfsStaticFile, day: date | datetime | None = None
) -> str:
    """Key for the raw line list of one static archive member."""
    return f"{STATIC_NAMESPACE}:file:{static_file.value}:{utc_date_stamp(day)}"


def route_shape_key(route_id: str, day: date | datetime | None = None) -> str:
    route_id = _identifier(route_id, "Route ID")
    return f"{SHAPE_NAMESPACE}:route:{route_id}:{utc_date_stamp(day)}"


__all__ = [
    "all_routes_key",
    "all_vehicles_enhanced_key",
    "all_vehicles_key",
    "route_info_key",
    "route_shape_key",
    "static_file_key",
    "utc_date_stamp",
    "vehicle_key",
    "vehicles_by_route_enhanced_key",
    "vehicles_by_route_key",
]
