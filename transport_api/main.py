from contextlib import asynccontextmanager
import logging

from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from transport_api.api.metrics import router as metrics_router
from transport_api.api.v1.routes import api_router
from transport_api.api.v1.shared.errors import install_exception_handlers
from transport_api.core.config import get_settings
from transport_api.core.telemetry import configure_opentelemetry, instrument_app
from transport_api.jobs.cache_cleanup import CacheCleanupScheduler
from transport_api.services.cache import get_cache_service
from transport_api.services.gtfs_data import GtfsDataService

logger = logging.getLogger(__name__)
REQUEST_ID_HEADER = "X-Request-Id"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _configure_logging(log_level: str) -> None:
    """Install the root handler once; noisy client libraries stay at WARNING."""
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)
    for name in ("httpx", "httpcore", "apscheduler"):
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def _install_request_id_middleware(app: FastAPI) -> None:
    """Ensure each response includes a stable X-Request-Id header."""

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER, str(uuid4()))
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events."""
    settings = get_settings()
    configure_opentelemetry(settings)

    app.state.gtfs_data_service = GtfsDataService(settings)

    cleanup = None
    if settings.cache_cleanup_enabled:
        cleanup = CacheCleanupScheduler(settings, get_cache_service())
        cleanup.start()
    app.state.cache_cleanup = cleanup

    yield

    if cleanup is not None:
        cleanup.stop()
    await app.state.gtfs_data_service.aclose()


def create_app() -> FastAPI:
    """Application factory for FastAPI."""
    settings = get_settings()
    _configure_logging(settings.log_level)

    app = FastAPI(
        title="Transport API",
        description="Cached GTFS realtime and static transit data.",
        version="0.1.0",
        lifespan=lifespan,
    )

    instrument_app(app, enabled=settings.otel_enabled)
    _install_request_id_middleware(app)
    install_exception_handlers(app)

    if settings.cors_allow_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_allow_origins,
            allow_credentials=True,
            allow_methods=["GET"],
            allow_headers=["*"],
            expose_headers=["ETag", REQUEST_ID_HEADER],
        )

    app.include_router(metrics_router)
    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()
