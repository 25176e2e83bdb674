"""Prometheus metrics for the document engine."""

from __future__ import annotations

from prometheus_client import (
    Counter,
    Histogram,
    Info,
    start_http_server,
    REGISTRY,
    CollectorRegistry,
)


class MetricsRegistry:
    """Registry of all document engine metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry or REGISTRY

        # Operation metrics
        self.operations_total = Counter(
            "docengine_operations_total",
            "Total number of collection operations",
            ["operation", "status"],  # status: success, error
            registry=self._registry,
        )

        self.operation_latency_seconds = Histogram(
            "docengine_operation_latency_seconds",
            "Collection operation latency in seconds",
            ["operation"],
            buckets=(0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0),
            registry=self._registry,
        )

        # Query path metrics
        self.documents_scanned_total = Counter(
            "docengine_documents_scanned_total",
            "Documents evaluated against a filter during full scans",
            ["collection"],
            registry=self._registry,
        )

        self.identity_lookups_total = Counter(
            "docengine_identity_lookups_total",
            "Filters served by the identity point lookup",
            ["collection"],
            registry=self._registry,
        )

        # Batch metrics
        self.partial_batch_failures_total = Counter(
            "docengine_partial_batch_failures_total",
            "Multi-document operations stopped by a per-document failure",
            ["operation"],
            registry=self._registry,
        )

        # Engine info
        self.info = Info(
            "docengine",
            "Document engine information",
            registry=self._registry,
        )

    def record_operation(self, operation: str, duration_seconds: float, success: bool) -> None:
        """Record one collection operation.

        Args:
            operation: Operation name (insert_one, find, ...)
            duration_seconds: Wall-clock duration
            success: Whether the operation returned normally
        """
        status = "success" if success else "error"
        self.operations_total.labels(operation=operation, status=status).inc()
        self.operation_latency_seconds.labels(operation=operation).observe(duration_seconds)

    def record_scan(self, collection: str, documents: int) -> None:
        """Record a full scan that evaluated ``documents`` candidates."""
        self.documents_scanned_total.labels(collection=collection).inc(documents)

    def record_identity_lookup(self, collection: str) -> None:
        """Record a filter served by the identity point lookup."""
        self.identity_lookups_total.labels(collection=collection).inc()

    def record_partial_batch(self, operation: str) -> None:
        """Record a batch stopped by a per-document failure."""
        self.partial_batch_failures_total.labels(operation=operation).inc()


# Global metrics registry
_metrics: MetricsRegistry | None = None


def setup_metrics(port: int = 8001, registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """
    Set up Prometheus metrics server.

    Args:
        port: Port for the metrics HTTP server
        registry: Optional custom registry

    Returns:
        The metrics registry
    """
    global _metrics
    if _metrics is None or registry is not None:
        _metrics = MetricsRegistry(registry)

    from doc_engine import __version__
    _metrics.info.info({
        "version": __version__,
    })

    # Start HTTP server for Prometheus scraping
    start_http_server(port, registry=registry or REGISTRY)

    return _metrics


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics
