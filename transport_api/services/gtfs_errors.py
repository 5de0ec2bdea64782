"""GTFS and cache exception definitions."""

from __future__ import annotations


class InvalidCacheArgumentError(ValueError):
    """Raised for a non-positive TTL or an empty cache key identifier."""


class UpstreamFetchError(Exception):
    """Raised when the GTFS provider cannot be reached or returns garbage."""


class NoDataAvailableError(Exception):
    """Raised when a fetch succeeds but yields no usable records."""


__all__ = [
    "InvalidCacheArgumentError",
    "UpstreamFetchError",
    "NoDataAvailableError",
]
