"""Optional OpenTelemetry tracing.

Services call :func:`get_tracer` unconditionally; without a configured
provider the API hands back no-op spans. :func:`setup_otel` installs the SDK
provider and the HTTP and database instrumentations when ``OTEL_ENABLED`` is
set and the ``otel`` extra is installed.
"""

import logging

from opentelemetry import trace

from app.config import settings

logger = logging.getLogger(__name__)


def get_tracer(name: str | None = None) -> trace.Tracer:
    return trace.get_tracer(name or settings.otel_service_name)


def _instrument_fastapi(app) -> None:
    from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

    FastAPIInstrumentor.instrument_app(app, excluded_urls="health,metrics")


def _instrument_sqlalchemy(app) -> None:
    from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor

    from app.db import get_engine

    SQLAlchemyInstrumentor().instrument(engine=get_engine())


_INSTRUMENTORS = (
    ("fastapi", _instrument_fastapi),
    ("sqlalchemy", _instrument_sqlalchemy),
)


def _build_provider():
    from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor

    provider = TracerProvider(resource=Resource.create({"service.name": settings.otel_service_name}))
    endpoint = settings.otel_exporter_endpoint
    exporter = OTLPSpanExporter(endpoint=f"{endpoint.rstrip('/')}/v1/traces") if endpoint else OTLPSpanExporter()
    provider.add_span_processor(BatchSpanProcessor(exporter))
    return provider


def setup_otel(app) -> list[str]:
    """Enable tracing; returns the names of the instrumentations that took effect."""
    if not settings.otel_enabled:
        return []
    try:
        provider = _build_provider()
    except ImportError:
        logger.exception("otel_sdk_missing install the 'otel' extra to enable tracing")
        return []
    trace.set_tracer_provider(provider)

    enabled = []
    for name, instrument in _INSTRUMENTORS:
        try:
            instrument(app)
        except ImportError:
            logger.warning("otel_instrumentation_missing name=%s", name, exc_info=True)
            continue
        enabled.append(name)
    logger.info("otel_enabled service=%s instrumented=%s", settings.otel_service_name, ",".join(enabled))
    return enabled
