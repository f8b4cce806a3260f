"""OpenTelemetry setup for the task API.

Off unless ``OTEL_ENABLED=true``. When on, this configures traces and
metrics exported over OTLP/HTTP, trace ids on log records, and spans for
every SQL statement and HTTP request.
"""

import atexit
import logging
from importlib.metadata import version
from typing import Any

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from task_api.config import Settings


logger = logging.getLogger(__name__)

# Matched against the full request URL; only the bare root (health check).
HEALTH_URL_PATTERN = r"^https?://[^/]+/$"


def setup_telemetry(
    settings: Settings,
    engine: Any = None,
) -> tuple[trace.Tracer, metrics.Meter]:
    """Initialize tracing, metrics and log correlation.

    Args:
        settings: Application settings
        engine: SQLAlchemy engine to instrument (optional)

    Returns:
        Tuple of (tracer, meter); no-op implementations when disabled
    """
    if not settings.otel_enabled:
        logger.info("OpenTelemetry disabled")
        return trace.get_tracer(settings.service_name), metrics.get_meter(settings.service_name)

    resource = Resource.create(
        {
            "service.name": settings.service_name,
            "service.version": version("task-api"),
            "deployment.environment": settings.scout_environment,
        }
    )
    endpoint = settings.otel_exporter_otlp_endpoint

    # Traces
    trace_provider = TracerProvider(resource=resource)
    trace_provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=f"{endpoint}/v1/traces"))
    )
    trace.set_tracer_provider(trace_provider)

    # Metrics
    metric_reader = PeriodicExportingMetricReader(
        OTLPMetricExporter(endpoint=f"{endpoint}/v1/metrics"),
        export_interval_millis=10000,
    )
    metric_provider = MeterProvider(resource=resource, metric_readers=[metric_reader])
    metrics.set_meter_provider(metric_provider)

    # Flush buffered telemetry on exit
    atexit.register(trace_provider.shutdown)
    atexit.register(metric_provider.shutdown)

    LoggingInstrumentor().instrument(set_logging_format=True)

    if engine is not None:
        SQLAlchemyInstrumentor().instrument(engine=engine)

    logger.info(
        "OpenTelemetry initialized",
        extra={"service": settings.service_name, "endpoint": endpoint},
    )

    return trace.get_tracer(settings.service_name), metrics.get_meter(settings.service_name)


def instrument_fastapi(app: Any) -> None:
    """Instrument FastAPI app after creation.

    Creates spans for every HTTP request with method, path, status code, duration,
    except the health check.
    """
    from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

    FastAPIInstrumentor.instrument_app(
        app,
        excluded_urls=HEALTH_URL_PATTERN,
        exclude_spans=["receive", "send"],
    )
