"""OpenTelemetry tracing for collection operations.

Every public collection call runs inside one span named
``collection.<operation>``. The span carries the database semantic
attributes up front and the result counts once the operation returns.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Generator

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import SpanProcessor, TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

DB_SYSTEM = "doc_engine"
RESULT_ATTRIBUTE_PREFIX = "docengine."

_tracer: trace.Tracer | None = None


def setup_tracing(
    service_name: str = "doc_engine",
    otlp_endpoint: str | None = None,
    span_processor: SpanProcessor | None = None,
) -> trace.Tracer:
    """
    Set up OpenTelemetry tracing.

    The tracer is taken from the new provider directly, so spans reach its
    processors even when another provider was installed globally first.

    Args:
        service_name: Name of the service for tracing
        otlp_endpoint: OTLP collector endpoint (e.g., "http://localhost:4317")
        span_processor: Extra processor, e.g. a SimpleSpanProcessor over an
            in-memory exporter

    Returns:
        Configured tracer instance
    """
    global _tracer

    from doc_engine import __version__

    resource = Resource.create(
        {
            "service.name": service_name,
            "service.version": __version__,
        }
    )
    provider = TracerProvider(resource=resource)

    if otlp_endpoint:
        otlp_exporter = OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True)
        provider.add_span_processor(BatchSpanProcessor(otlp_exporter))

    if span_processor is not None:
        provider.add_span_processor(span_processor)

    trace.set_tracer_provider(provider)
    _tracer = provider.get_tracer(service_name, __version__)
    return _tracer


def get_tracer() -> trace.Tracer:
    """Get the global tracer instance."""
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer("doc_engine")
    return _tracer


def reset_tracing() -> None:
    """Forget the configured tracer; later spans use the global provider."""
    global _tracer
    _tracer = None


@contextmanager
def trace_span(
    name: str,
    attributes: dict[str, Any] | None = None,
) -> Generator[trace.Span, None, None]:
    """
    Context manager for creating a trace span.

    Args:
        name: Name of the span
        attributes: Optional attributes to add to the span; None values are skipped

    Yields:
        The created span
    """
    tracer = get_tracer()
    with tracer.start_as_current_span(name) as span:
        for key, value in (attributes or {}).items():
            # OpenTelemetry rejects None attribute values.
            if value is not None:
                span.set_attribute(key, value)
        yield span


@contextmanager
def collection_span(collection: str, operation: str) -> Generator[trace.Span, None, None]:
    """Span around one collection operation.

    Errors propagate; the SDK records them on the span and marks it failed.
    """
    with trace_span(
        f"collection.{operation}",
        {
            "db.system": DB_SYSTEM,
            "db.collection.name": collection,
            "db.operation.name": operation,
        },
    ) as span:
        yield span


def record_result(span: trace.Span, **counts: int | None) -> None:
    """Attach result counts (matched, modified, ...) to a span."""
    for key, value in counts.items():
        if value is not None:
            span.set_attribute(f"{RESULT_ATTRIBUTE_PREFIX}{key}", value)
