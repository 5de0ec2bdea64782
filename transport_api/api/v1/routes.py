from fastapi import APIRouter

from transport_api.api.v1.endpoints.cache import router as cache_router
from transport_api.api.v1.endpoints.gtfs.routes import router as routes_router
from transport_api.api.v1.endpoints.gtfs.static_files import router as static_router
from transport_api.api.v1.endpoints.gtfs.vehicles import router as vehicles_router
from transport_api.api.v1.endpoints.health import router as health_router

api_router = APIRouter()
api_router.include_router(health_router, tags=["meta"])
api_router.include_router(vehicles_router, prefix="/vehicles", tags=["vehicles"])
api_router.include_router(routes_router, prefix="/routes", tags=["routes"])
api_router.include_router(static_router, prefix="/static", tags=["static"])
api_router.include_router(cache_router, prefix="/cache", tags=["cache"])
