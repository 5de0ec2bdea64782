"""Shared utilities for API v1 endpoints.

Dependency providers, HTTP cache headers and exception mapping used across
the endpoint modules.
"""

from transport_api.api.v1.shared.cache_headers import (
    realtime_response,
    set_cache_header,
)
from transport_api.api.v1.shared.dependencies import (
    get_cached_gtfs_service,
    get_gtfs_data_service,
)
from transport_api.api.v1.shared.errors import install_exception_handlers

__all__ = [
    "get_cached_gtfs_service",
    "get_gtfs_data_service",
    "install_exception_handlers",
    "realtime_response",
    "set_cache_header",
]
