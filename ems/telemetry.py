"""OpenTelemetry configuration for the EMS application."""

import os
import sys

from opentelemetry import metrics, trace
from opentelemetry.exporter.prometheus import PrometheusMetricReader
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from prometheus_client import start_http_server

from .config import settings
from .logging_config import get_logger

logger = get_logger(__name__)


def setup_telemetry(app):
    """Configure OpenTelemetry tracing and metrics for the FastAPI application."""
    try:
        # Skip telemetry setup by default (enable with ENABLE_TELEMETRY=1)
        if not os.getenv("ENABLE_TELEMETRY"):
            return

        # Skip telemetry setup during tests to avoid I/O issues
        if "pytest" in sys.modules or os.getenv("TESTING"):
            logger.info("Skipping OpenTelemetry setup during tests")
            return

        prometheus_reader = PrometheusMetricReader()
        metrics.set_meter_provider(MeterProvider(metric_readers=[prometheus_reader]))

        metrics_port = settings.metrics_port
        try:
            start_http_server(metrics_port)
        except OSError:
            metrics_port += 1
            start_http_server(metrics_port)
        logger.info("Prometheus metrics server started", port=metrics_port)

        trace.set_tracer_provider(TracerProvider())
        tracer_provider = trace.get_tracer_provider()

        # Console exporter until an OTLP collector is available
        span_processor = BatchSpanProcessor(ConsoleSpanExporter())
        tracer_provider.add_span_processor(span_processor)  # type: ignore[attr-defined]

        FastAPIInstrumentor.instrument_app(app)
        logger.info("FastAPI instrumentation enabled")

        SQLAlchemyInstrumentor().instrument()
        logger.info("SQLAlchemy instrumentation enabled")

        logger.info("OpenTelemetry tracing and metrics setup completed")

    except Exception as e:
        logger.error("Failed to setup OpenTelemetry", error=str(e))
        # Don't fail the application if telemetry setup fails
