"""One-call setup of logging, metrics and tracing from configuration."""

from __future__ import annotations

from doc_engine.infrastructure.config import ObservabilityConfig
from doc_engine.infrastructure.logging import get_logger, setup_logging
from doc_engine.infrastructure.metrics import MetricsRegistry, get_metrics, setup_metrics
from doc_engine.infrastructure.tracing import setup_tracing


def setup_observability(config: ObservabilityConfig) -> MetricsRegistry:
    """
    Configure logging, metrics and tracing.

    Tracing is only installed when an OTLP endpoint is configured; the
    metrics HTTP server is only started when metrics are enabled.

    Args:
        config: Observability section of the engine configuration

    Returns:
        The metrics registry collection operations should report to
    """
    setup_logging(level=config.log_level, log_format=config.log_format)

    if config.otel_endpoint:
        setup_tracing(
            service_name=config.otel_service_name,
            otlp_endpoint=config.otel_endpoint,
        )

    metrics = setup_metrics(config.metrics_port) if config.metrics_enabled else get_metrics()

    get_logger(__name__).info(
        "observability_configured",
        log_level=config.log_level,
        metrics_enabled=config.metrics_enabled,
        tracing_enabled=config.otel_endpoint is not None,
    )
    return metrics
