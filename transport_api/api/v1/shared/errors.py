"""Shared error handling utilities for API endpoints.

Maps the service exceptions onto HTTP responses and provides the helper used
by the development-only inspection endpoints.
"""

import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from transport_api.services.gtfs_errors import (
    InvalidCacheArgumentError,
    NoDataAvailableError,
    UpstreamFetchError,
)

logger = logging.getLogger(__name__)


def development_only() -> HTTPException:
    """404 returned by inspection endpoints outside development."""
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Not found",
    )


async def handle_no_data(request: Request, exc: NoDataAvailableError) -> JSONResponse:
    logger.info("No data for %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)}
    )


async def handle_upstream_failure(
    request: Request, exc: UpstreamFetchError
) -> JSONResponse:
    logger.error("Upstream failure for %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": "GTFS provider is unavailable"},
    )


async def handle_invalid_argument(
    request: Request, exc: InvalidCacheArgumentError
) -> JSONResponse:
    logger.warning("Invalid argument for %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)}
    )


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(NoDataAvailableError, handle_no_data)
    app.add_exception_handler(UpstreamFetchError, handle_upstream_failure)
    app.add_exception_handler(InvalidCacheArgumentError, handle_invalid_argument)
