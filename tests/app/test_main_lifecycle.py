"""Tests for FastAPI app lifecycle helpers."""

from __future__ import annotations

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from transport_api import main
from transport_api.services.gtfs_errors import (
    InvalidCacheArgumentError,
    NoDataAvailableError,
    UpstreamFetchError,
)
from tests.conftest import make_settings


def test_configure_logging_quiets_client_libraries():
    names = ["httpx", "httpcore", "apscheduler"]
    original = [(logging.getLogger(n), logging.getLogger(n).level) for n in names]
    root_level = logging.getLogger().level

    try:
        main._configure_logging("debug")
        assert logging.getLogger().level == logging.DEBUG
        for logger, _ in original:
            assert logger.level == logging.WARNING

        main._configure_logging("not-a-level")
        assert logging.getLogger().level == logging.INFO
    finally:
        logging.getLogger().setLevel(root_level)
        for logger, level in original:
            logger.setLevel(level)


def test_request_id_middleware_respects_existing_header(monkeypatch):
    app = FastAPI()
    main._install_request_id_middleware(app)

    @app.get("/ping")
    async def ping():
        return {"ok": True}

    client = TestClient(app)
    response = client.get("/ping", headers={main.REQUEST_ID_HEADER: "external-id"})
    assert response.headers[main.REQUEST_ID_HEADER] == "external-id"

    monkeypatch.setattr(main, "uuid4", lambda: "generated-id")
    response = client.get("/ping")
    assert response.headers[main.REQUEST_ID_HEADER] == "generated-id"


@pytest.mark.parametrize(
    ("exc", "status"),
    [
        (NoDataAvailableError("nothing"), 404),
        (UpstreamFetchError("down"), 502),
        (InvalidCacheArgumentError("bad"), 400),
    ],
)
def test_exception_handlers_map_status(exc, status):
    app = main.create_app()

    @app.get("/boom")
    async def boom():
        raise exc

    assert TestClient(app).get("/boom").status_code == status


def _patch_lifespan(monkeypatch, settings):
    data_service = MagicMock()
    data_service.aclose = AsyncMock()
    scheduler = MagicMock()
    scheduler_cls = MagicMock(return_value=scheduler)

    monkeypatch.setattr(main, "get_settings", lambda: settings)
    monkeypatch.setattr(main, "configure_opentelemetry", MagicMock(return_value=False))
    monkeypatch.setattr(main, "GtfsDataService", MagicMock(return_value=data_service))
    monkeypatch.setattr(main, "CacheCleanupScheduler", scheduler_cls)
    return data_service, scheduler_cls, scheduler


def test_lifespan_starts_cleanup_when_enabled(monkeypatch):
    settings = make_settings(cache_cleanup_enabled=True)
    data_service, scheduler_cls, scheduler = _patch_lifespan(monkeypatch, settings)

    app = main.create_app()
    with TestClient(app):
        assert app.state.gtfs_data_service is data_service
        scheduler.start.assert_called_once()

    scheduler.stop.assert_called_once()
    data_service.aclose.assert_awaited_once()


def test_lifespan_skips_cleanup_when_disabled(monkeypatch):
    settings = make_settings(cache_cleanup_enabled=False)
    data_service, scheduler_cls, _ = _patch_lifespan(monkeypatch, settings)

    app = main.create_app()
    with TestClient(app):
        assert app.state.cache_cleanup is None

    scheduler_cls.assert_not_called()
    data_service.aclose.assert_awaited_once()
