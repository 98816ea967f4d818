"""Observability setup for OpenTelemetry, Prometheus metrics and structured logging."""

import logging

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from prometheus_client import CollectorRegistry, Counter, generate_latest
import structlog

from .. import __version__
from .config import settings

# Prometheus metrics
REGISTRY = CollectorRegistry()

TOURS_CREATED = Counter(
    'tours_created_total',
    'Total tours created from bookings',
    registry=REGISTRY
)

STAFF_ASSIGNED = Counter(
    'tour_staff_assigned_total',
    'Total staff members assigned to tours',
    ['role'],
    registry=REGISTRY
)

STAFF_RELEASED = Counter(
    'tour_staff_released_total',
    'Total staff members returned to Available',
    ['reason'],
    registry=REGISTRY
)

TOUR_REJECTIONS = Counter(
    'tour_rejections_total',
    'Total tour rejections',
    ['source'],
    registry=REGISTRY
)

ASSIGNMENT_CONFLICTS = Counter(
    'tour_assignment_conflicts_total',
    'Total assignments refused because staff were unavailable',
    ['role'],
    registry=REGISTRY
)


def setup_structured_logging():
    """Configure structured logging with structlog."""

    def add_trace_context(logger, method_name, event_dict):
        """Add trace context to log events."""
        span = trace.get_current_span()
        if span and span.is_recording():
            ctx = span.get_span_context()
            event_dict['trace_id'] = format(ctx.trace_id, '032x')
            event_dict['span_id'] = format(ctx.span_id, '016x')
        return event_dict

    structlog.configure(
        processors=[
            # request_id is bound per request by the logging middleware
            structlog.contextvars.merge_contextvars,
            add_trace_context,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.ConsoleRenderer() if settings.debug else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level)
        ),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _service_resource(app_name: str) -> Resource:
    return Resource.create({
        "service.name": app_name,
        "service.version": __version__,
        "environment": settings.environment,
    })


def setup_tracing(app_name: str = settings.service_name):
    """Setup OpenTelemetry tracing."""
    provider = TracerProvider(resource=_service_resource(app_name))

    if settings.otlp_endpoint:
        otlp_exporter = OTLPSpanExporter(endpoint=settings.otlp_endpoint)
        provider.add_span_processor(BatchSpanProcessor(otlp_exporter))

    trace.set_tracer_provider(provider)
    return trace.get_tracer(__name__)


def setup_metrics(app_name: str = settings.service_name):
    """Setup OpenTelemetry metrics."""
    if settings.otlp_endpoint:
        otlp_exporter = OTLPMetricExporter(endpoint=settings.otlp_endpoint)
        reader = PeriodicExportingMetricReader(exporter=otlp_exporter, export_interval_millis=60000)
        metrics.set_meter_provider(
            MeterProvider(resource=_service_resource(app_name), metric_readers=[reader])
        )

    return metrics.get_meter(__name__)


def instrument_fastapi(app):
    """Instrument FastAPI with OpenTelemetry."""
    FastAPIInstrumentor.instrument_app(app)


def instrument_sqlalchemy(engine):
    """Instrument the async engine's underlying sync engine with OpenTelemetry."""
    SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine)


class MetricsCollector:
    """Collector for tour lifecycle metrics."""

    @staticmethod
    def record_tour_created():
        """Record a tour creation."""
        TOURS_CREATED.inc()

    @staticmethod
    def record_staff_assigned(role: str):
        """Record a staff member being assigned to a tour."""
        STAFF_ASSIGNED.labels(role=role).inc()

    @staticmethod
    def record_staff_released(reason: str, count: int = 1):
        """Record staff members returned to Available."""
        if count:
            STAFF_RELEASED.labels(reason=reason).inc(count)

    @staticmethod
    def record_rejection(source: str):
        """Record a tour rejection (``reject`` or ``submission``)."""
        TOUR_REJECTIONS.labels(source=source).inc()

    @staticmethod
    def record_assignment_conflict(role: str):
        """Record an assignment refused because staff were unavailable."""
        ASSIGNMENT_CONFLICTS.labels(role=role).inc()


def get_prometheus_metrics():
    """Get Prometheus metrics for the /metrics endpoint."""
    return generate_latest(REGISTRY)


# Global metrics collector instance
metrics_collector = MetricsCollector()


def get_logger(name: str):
    """Get a structlog logger bound to ``name``."""
    return structlog.get_logger(name)
