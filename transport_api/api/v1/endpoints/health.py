import logging
import time

from fastapi import APIRouter, Depends, HTTPException, Response, status

from transport_api.api.v1.shared.dependencies import get_gtfs_data_service
from transport_api.core.config import Settings, get_settings
from transport_api.services.gtfs_data import GtfsDataService
from transport_api.services.gtfs_errors import UpstreamFetchError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def healthcheck() -> dict[str, str]:
    """Lightweight readiness probe."""
    return {"status": "ok"}


@router.get("/health/gtfs")
async def gtfs_healthcheck(
    response: Response,
    data_service: GtfsDataService = Depends(get_gtfs_data_service),
    settings: Settings = Depends(get_settings),
) -> dict[str, object]:
    """Probe the realtime feed directly, bypassing the cache."""
    if not settings.cache_enable_health_check:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")

    started = time.perf_counter()
    try:
        payload = await data_service.get_realtime_data()
    except UpstreamFetchError as exc:
        logger.warning("GTFS health check failed: %s", exc)
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {"status": "unhealthy", "detail": str(exc)}

    elapsed_ms = round((time.perf_counter() - started) * 1000)
    if not payload:
        return {"status": "degraded", "detail": "GTFS service returned empty data"}

    return {
        "status": "healthy",
        "response_time_ms": elapsed_ms,
        "data_size_bytes": len(payload),
    }
