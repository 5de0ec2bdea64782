from fastapi import APIRouter, Depends

from transport_api.api.v1.shared.dependencies import get_cached_gtfs_service
from transport_api.models.gtfs import GtfsStaticFile, StaticFileResponse
from transport_api.services.cached_gtfs import CachedGtfsService

router = APIRouter()


@router.get(
    "/{static_file}",
    response_model=StaticFileResponse,
    summary="Data lines of one static archive member",
)
async def get_static_file(
    static_file: GtfsStaticFile,
    gtfs: CachedGtfsService = Depends(get_cached_gtfs_service),
) -> StaticFileResponse:
    lines = await gtfs.get_static_file_data(static_file)
    return StaticFileResponse(file=static_file, line_count=len(lines), lines=lines)
