from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from transport_api.api.v1.shared.dependencies import get_gtfs_data_service, get_ttl_config
from transport_api.core.config import Settings, get_settings
from transport_api.main import create_app
from transport_api.models.gtfs import GtfsStaticFile
from transport_api.services.cache import CacheService, TTLConfig, get_cache_service
from transport_api.services.gtfs_errors import UpstreamFetchError
from tests.conftest import ROUTES_TXT, SHAPES_TXT, build_feed


def _lines(text: str) -> list[str]:
    return [line for line in text.splitlines()[1:] if line]


class FakeGtfsDataService:
    """Upstream stand-in with switchable failure modes."""

    def __init__(self) -> None:
        self.realtime = build_feed(
            [("42", "6", 45.5, 15.75), ("43", "6", 45.25, 16.0), ("77", "109", 45.75, 15.5)]
        )
        self.static = {
            GtfsStaticFile.ROUTES: _lines(ROUTES_TXT),
            GtfsStaticFile.SHAPES: _lines(SHAPES_TXT),
        }
        self.fail = False
        self.realtime_calls = 0

    async def get_realtime_data(self) -> bytes:
        self.realtime_calls += 1
        if self.fail:
            raise UpstreamFetchError("GTFS realtime feed is unreachable")
        return self.realtime

    async def get_static_file_data(self, static_file: GtfsStaticFile) -> list[str]:
        if self.fail:
            raise UpstreamFetchError("GTFS static feed is unreachable")
        return list(self.static.get(static_file, []))


@pytest.fixture
def fake_upstream() -> FakeGtfsDataService:
    return FakeGtfsDataService()


@pytest.fixture
def api_settings(settings: Settings) -> Settings:
    return settings


@pytest.fixture
def api_cache(api_settings: Settings, clock) -> CacheService:
    return CacheService(api_settings, clock=clock)


@pytest.fixture
def api_client(
    api_settings: Settings,
    api_cache: CacheService,
    fake_upstream: FakeGtfsDataService,
) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: api_settings
    app.dependency_overrides[get_cache_service] = lambda: api_cache
    app.dependency_overrides[get_gtfs_data_service] = lambda: fake_upstream
    app.dependency_overrides[get_ttl_config] = lambda: TTLConfig(api_settings)
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
