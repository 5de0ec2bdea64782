"""Shared pytest fixtures: a controllable clock, settings and GTFS payload builders."""

from __future__ import annotations

import io
import zipfile
from datetime import datetime, timedelta, timezone

import pytest
from google.transit import gtfs_realtime_pb2

from transport_api.core.config import Settings
from transport_api.services.cache import CacheService


class FakeClock:
    """Deterministic UTC clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current += timedelta(**kwargs)


def make_settings(**overrides) -> Settings:
    values = {
        "environment": "development",
        "gtfs_base_url": "https://gtfs.test",
        "cache_realtime_ttl_seconds": 30,
        "cache_static_ttl_hours": 24,
        "cache_size_limit": 100,
        "cache_compaction_threshold": 0.25,
        "otel_enabled": False,
    }
    values.update(overrides)
    return Settings(**values)


def build_feed(vehicles: list[tuple[str, str, float, float]]) -> bytes:
    """Serialize a FeedMessage with one entity per (vehicle_id, route_id, lat, lon)."""
    feed = gtfs_realtime_pb2.FeedMessage()
    feed.header.gtfs_realtime_version = "2.0"
    feed.header.timestamp = 1704110400
    for index, (vehicle_id, route_id, lat, lon) in enumerate(vehicles):
        entity = feed.entity.add()
        entity.id = f"entity-{index}"
        entity.vehicle.vehicle.id = vehicle_id
        entity.vehicle.trip.route_id = route_id
        entity.vehicle.trip.trip_id = f"trip-{index}"
        entity.vehicle.position.latitude = lat
        entity.vehicle.position.longitude = lon
        entity.vehicle.timestamp = 1704110400
    return feed.SerializeToString()


def build_static_archive(members: dict[str, str]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, content in members.items():
            archive.writestr(name, content)
    return buffer.getvalue()


ROUTES_TXT = (
    "route_id,agency_id,route_short_name,route_long_name,route_desc,route_type\n"
    "1,ZET,1,Zapadni kolodvor - Borongaj,,0\n"
    "6,ZET,6,Crnomerec - Sopot,,0\n"
    "109,ZET,109,Crnomerec - Dugave,,3\n"
)

SHAPES_TXT = (
    "shape_id,shape_pt_lat,shape_pt_lon,shape_pt_sequence\n"
    "6_1_A,45.8150,15.9819,1\n"
    "6_1_A,45.8160,15.9830,2\n"
    "6_2_B,45.8000,15.9700,1\n"
    "61_1_A,45.7000,15.9000,1\n"
)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def cache_service(settings: Settings, clock: FakeClock) -> CacheService:
    return CacheService(settings, clock=clock)
