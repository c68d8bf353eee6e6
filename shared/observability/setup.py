import logging
import uuid

import structlog
from fastapi import FastAPI, Request
from prometheus_fastapi_instrumentator import Instrumentator

# OpenTelemetry
from opentelemetry import trace
from opentelemetry.sdk.resources import Resource, SERVICE_NAME
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor

from shared.config.settings import Settings

REQUEST_ID_HEADER = "X-Request-ID"


# 1. Structlog processors
def add_otel_ids(logger, log_method, event_dict):
    """Stamps the active span's trace/span ids on the event, when tracing is on."""
    span = trace.get_current_span()
    if span.is_recording():
        ctx = span.get_span_context()
        event_dict["trace_id"] = trace.format_trace_id(ctx.trace_id)
        event_dict["span_id"] = trace.format_span_id(ctx.span_id)
    return event_dict


def service_name_processor(service_name: str):
    def add_service_name(logger, log_method, event_dict):
        event_dict.setdefault("service", service_name)
        return event_dict

    return add_service_name


# 2. JSON logs, one object per line on stdout
def configure_logging(service_name: str, log_level: str = "INFO"):
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            add_otel_ids,
            service_name_processor(service_name),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


# 3. Request context: every log line emitted while serving a request carries its id and route
def install_request_context(app: FastAPI):
    @app.middleware("http")
    async def bind_request_context(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


# 4. Tracing, only when a collector is configured
def configure_tracing(app: FastAPI, service_name: str, otlp_endpoint: str):
    provider = TracerProvider(resource=Resource.create({SERVICE_NAME: service_name}))
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True)))
    trace.set_tracer_provider(provider)

    FastAPIInstrumentor.instrument_app(app)
    # Child spans for Razorpay calls
    HTTPXClientInstrumentor().instrument()


# 5. Prometheus: HTTP metrics plus the ecomm_* business counters, at /metrics
def configure_metrics(app: FastAPI):
    Instrumentator(excluded_handlers=["/health", "/metrics"]).instrument(app).expose(app, include_in_schema=False)


def setup_observability(app: FastAPI, settings: Settings):
    """Wires logging, request context, tracing and metrics. Called once per app by create_app()."""
    configure_logging(settings.service_name, settings.log_level)
    install_request_context(app)
    if settings.otlp_endpoint:
        configure_tracing(app, settings.service_name, settings.otlp_endpoint)
    if settings.metrics_enabled:
        configure_metrics(app)
