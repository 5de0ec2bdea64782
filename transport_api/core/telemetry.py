"""OpenTelemetry configuration and initialization."""

from __future__ import annotations

import logging
from typing import Any

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from transport_api.core.config import Settings

logger = logging.getLogger(__name__)


def configure_opentelemetry(settings: Settings) -> bool:
    """Configure tracing for the process.

    Returns True when a tracer provider was installed. Failures are logged and
    the application keeps running untraced.
    """
    if not settings.otel_enabled:
        logger.info("OpenTelemetry tracing is disabled")
        return False

    try:
        resource = Resource.create(
            {
                "service.name": settings.otel_service_name,
                "service.version": settings.otel_service_version,
                "service.namespace": "transport",
            }
        )
        tracer_provider = TracerProvider(resource=resource)
        tracer_provider.add_span_processor(
            BatchSpanProcessor(
                OTLPSpanExporter(
                    endpoint=settings.otel_exporter_otlp_endpoint,
                    headers=settings.otel_exporter_otlp_headers,
                )
            )
        )
        trace.set_tracer_provider(tracer_provider)
    except Exception as exc:
        logger.warning("Failed to configure OpenTelemetry: %s", exc)
        return False

    logger.info(
        "OpenTelemetry configured for '%s' exporting to %s",
        settings.otel_service_name,
        settings.otel_exporter_otlp_endpoint,
    )
    return True


def instrument_app(app: Any, enabled: bool) -> None:
    """Instrument FastAPI and outbound httpx calls when tracing is on."""
    if not enabled:
        return

    try:
        FastAPIInstrumentor.instrument_app(app)
        HTTPXClientInstrumentor().instrument()
        logger.info("FastAPI and HTTPX instrumentation enabled")
    except Exception as exc:
        logger.warning("Failed to instrument application: %s", exc)


def get_tracer() -> trace.Tracer:
    """Get the configured tracer instance."""
    return trace.get_tracer("transport_api")
