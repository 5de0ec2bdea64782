"""HTTP cache header utilities for realtime endpoints.

Realtime responses carry an ETag derived from the serialized body so polling
clients can revalidate cheaply and receive 304 when nothing moved.
"""

import hashlib
from typing import Any

from fastapi import Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

REALTIME_MAX_AGE_SECONDS = 5


def set_cache_header(
    response: Response,
    ttl_seconds: int,
    *,
    public: bool = True,
    must_revalidate: bool = False,
) -> None:
    """Set Cache-Control header on a response."""
    visibility = "public" if public else "private"
    value = f"{visibility}, max-age={ttl_seconds}"
    if must_revalidate:
        value += ", must-revalidate"
    response.headers["Cache-Control"] = value


def compute_etag(body: bytes) -> str:
    return f'"{hashlib.sha256(body).hexdigest()[:32]}"'


def etag_matches(if_none_match: str | None, etag: str) -> bool:
    """Evaluate an If-None-Match header (weak comparison) against ``etag``."""
    if not if_none_match:
        return False
    candidates = [tag.strip() for tag in if_none_match.split(",")]
    if "*" in candidates:
        return True
    return any(tag.removeprefix("W/") == etag for tag in candidates)


def realtime_response(
    request: Request,
    payload: Any,
    *,
    max_age: int = REALTIME_MAX_AGE_SECONDS,
) -> Response:
    """JSON response with ETag and short-lived Cache-Control, or a bare 304."""
    response = JSONResponse(content=jsonable_encoder(payload))
    etag = compute_etag(response.body)

    if etag_matches(request.headers.get("if-none-match"), etag):
        response = Response(status_code=status.HTTP_304_NOT_MODIFIED)

    response.headers["ETag"] = etag
    set_cache_header(response, max_age, must_revalidate=True)
    return response
