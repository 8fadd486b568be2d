"""Observability setup for OpenTelemetry, metrics, and structured logging."""

import logging

import structlog
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, generate_latest

from .config import settings

SERVICE_NAME = "airline-booking-api"
SERVICE_VERSION = "1.0.0"

# Prometheus metrics
REGISTRY = CollectorRegistry()

# Request metrics
REQUEST_COUNT = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status_code'],
    registry=REGISTRY
)

REQUEST_DURATION = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    registry=REGISTRY
)

# Cache metrics
CACHE_REQUESTS = Counter(
    'cache_requests_total',
    'Lookaside cache lookups',
    ['key_family', 'result'],
    registry=REGISTRY
)

CACHE_INVALIDATIONS = Counter(
    'cache_invalidations_total',
    'Lookaside cache removals',
    ['key_family'],
    registry=REGISTRY
)

CACHE_ENTRIES = Gauge(
    'cache_entries',
    'Entries held by the lookaside cache after the last purge',
    registry=REGISTRY
)

# Business metrics
FLIGHT_WRITES = Counter(
    'flight_writes_total',
    'Flight writes by operation',
    ['operation'],
    registry=REGISTRY
)

BOOKINGS_CREATED = Counter(
    'bookings_created_total',
    'Total bookings committed',
    registry=REGISTRY
)

BOOKING_EVENT_HANDLER_FAILURES = Counter(
    'booking_event_handler_failures_total',
    'Booking-completed subscribers that raised',
    registry=REGISTRY
)


LOG_HANDLER_NAME = "structlog"


def add_trace_context(logger, method_name, event_dict):
    """Add trace context to log events."""
    span = trace.get_current_span()
    if span and span.is_recording():
        ctx = span.get_span_context()
        event_dict['trace_id'] = format(ctx.trace_id, '032x')
        event_dict['span_id'] = format(ctx.span_id, '016x')
    return event_dict


SHARED_PROCESSORS = [
    structlog.contextvars.merge_contextvars,
    add_trace_context,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
]


def build_log_formatter() -> structlog.stdlib.ProcessorFormatter:
    """
    Formatter that renders stdlib records through the structlog chain.

    ``extra={...}`` fields, the bound request id and the current trace ids
    all end up in the rendered line.
    """
    if settings.debug:
        renderers = [structlog.dev.ConsoleRenderer()]
    else:
        renderers = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]

    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[*SHARED_PROCESSORS, structlog.stdlib.ExtraAdder()],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *renderers,
        ],
    )


def setup_structured_logging():
    """Configure structlog and route stdlib logging through it."""
    structlog.configure(
        processors=[
            *SHARED_PROCESSORS,
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger()
    root.setLevel(getattr(logging, settings.log_level))
    if any(h.get_name() == LOG_HANDLER_NAME for h in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.set_name(LOG_HANDLER_NAME)
    handler.setFormatter(build_log_formatter())
    root.addHandler(handler)


def setup_tracing(app_name: str = SERVICE_NAME):
    """Setup OpenTelemetry tracing."""
    resource = Resource.create({
        "service.name": app_name,
        "service.version": SERVICE_VERSION,
        "environment": settings.environment,
    })

    provider = TracerProvider(resource=resource)

    # Export only when a collector is configured
    if settings.otlp_endpoint:
        otlp_exporter = OTLPSpanExporter(endpoint=settings.otlp_endpoint)
        provider.add_span_processor(BatchSpanProcessor(otlp_exporter))

    trace.set_tracer_provider(provider)
    return trace.get_tracer(__name__)


def instrument_fastapi(app):
    """Instrument FastAPI with OpenTelemetry."""
    FastAPIInstrumentor.instrument_app(app)


def instrument_sqlalchemy(engine):
    """Instrument the async engine's sync core with OpenTelemetry."""
    SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine)


class MetricsCollector:
    """Collector for cache and booking metrics."""

    @staticmethod
    def record_request(method: str, endpoint: str, status_code: int, duration_seconds: float):
        """Record a completed HTTP request."""
        REQUEST_COUNT.labels(method=method, endpoint=endpoint, status_code=str(status_code)).inc()
        REQUEST_DURATION.labels(method=method, endpoint=endpoint).observe(duration_seconds)

    @staticmethod
    def record_cache_request(key_family: str, hit: bool):
        """Record a cache lookup."""
        CACHE_REQUESTS.labels(key_family=key_family, result="hit" if hit else "miss").inc()

    @staticmethod
    def record_cache_invalidation(key_family: str):
        """Record a cache removal."""
        CACHE_INVALIDATIONS.labels(key_family=key_family).inc()

    @staticmethod
    def set_cache_entries(count: int):
        """Set the number of live cache entries."""
        CACHE_ENTRIES.set(count)

    @staticmethod
    def record_flight_write(operation: str):
        """Record a flight create, update or delete."""
        FLIGHT_WRITES.labels(operation=operation).inc()

    @staticmethod
    def record_booking_created():
        """Record a committed booking."""
        BOOKINGS_CREATED.inc()

    @staticmethod
    def record_booking_handler_failure():
        """Record a booking-completed subscriber failure."""
        BOOKING_EVENT_HANDLER_FAILURES.inc()


def get_prometheus_metrics():
    """Get Prometheus metrics for the /metrics endpoint."""
    return generate_latest(REGISTRY)


# Global metrics collector instance
metrics_collector = MetricsCollector()
