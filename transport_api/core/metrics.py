from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

CACHE_EVENTS = Counter(
    "transport_cache_events_total",
    "Cache operations recorded by the transport API.",
    labelnames=("cache", "event"),
)
CACHE_EVICTIONS = Counter(
    "transport_cache_evictions_total",
    "Cache entries dropped from the in-memory store.",
    labelnames=("reason",),
)
CACHE_SIZE_UNITS = Gauge(
    "transport_cache_size_units",
    "Size units currently held by the in-memory store.",
)
CACHE_REFRESH_LATENCY = Histogram(
    "transport_cache_refresh_seconds",
    "Latency of cache populate operations.",
    labelnames=("cache",),
)
UPSTREAM_REQUESTS = Counter(
    "transport_upstream_requests_total",
    "Outbound GTFS provider requests.",
    labelnames=("endpoint", "result"),
)
UPSTREAM_REQUEST_LATENCY = Histogram(
    "transport_upstream_request_seconds",
    "Latency of outbound GTFS provider requests.",
    labelnames=("endpoint",),
)


def record_cache_event(cache: str, event: str) -> None:
    """Increment a cache event counter."""
    CACHE_EVENTS.labels(cache=cache, event=event).inc()


def record_cache_eviction(reason: str) -> None:
    """Increment the eviction counter for a reason."""
    CACHE_EVICTIONS.labels(reason=reason).inc()


def set_cache_size_units(units: int) -> None:
    CACHE_SIZE_UNITS.set(units)


def observe_cache_refresh(cache: str, duration_seconds: float) -> None:
    """Record cache populate latency."""
    CACHE_REFRESH_LATENCY.labels(cache=cache).observe(duration_seconds)


def observe_upstream_request(
    endpoint: str, result: str, duration_seconds: float
) -> None:
    """Record upstream request result and latency."""
    UPSTREAM_REQUESTS.labels(endpoint=endpoint, result=result).inc()
    UPSTREAM_REQUEST_LATENCY.labels(endpoint=endpoint).observe(duration_seconds)
