"""Pytest configuration and fixtures for doc_engine tests."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Generator

import pytest
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from prometheus_client import CollectorRegistry

from doc_engine.adapters.outbound import InMemoryDocumentStore
from doc_engine.application import Collection
from doc_engine.infrastructure.config import Config, ObservabilityConfig, StorageConfig
from doc_engine.infrastructure.metrics import MetricsRegistry
from doc_engine.infrastructure.tracing import reset_tracing, setup_tracing


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_config(temp_dir: Path) -> Config:
    """Provide a test configuration backed by a temporary directory."""
    return Config(
        storage=StorageConfig(
            backend="file",
            data_dir=temp_dir / "data",
            fsync_on_flush=False,  # Faster for tests
        ),
        observability=ObservabilityConfig(
            log_level="DEBUG",
            log_format="console",
        ),
    )


@pytest.fixture
def metrics_registry() -> MetricsRegistry:
    """Provide a fresh metrics registry for each test."""
    # Use a separate registry to avoid conflicts between tests
    registry = CollectorRegistry(auto_describe=True)
    return MetricsRegistry(registry=registry)


@pytest.fixture
def span_exporter() -> Generator[InMemorySpanExporter, None, None]:
    """Collect finished spans in memory for the duration of a test."""
    exporter = InMemorySpanExporter()
    setup_tracing(service_name="doc_engine_test", span_processor=SimpleSpanProcessor(exporter))
    yield exporter
    reset_tracing()
    exporter.clear()


@pytest.fixture
def memory_store() -> Generator[InMemoryDocumentStore, None, None]:
    """Provide an empty in-memory document store."""
    store = InMemoryDocumentStore()
    yield store
    store.close()


@pytest.fixture
def users(memory_store: InMemoryDocumentStore, metrics_registry: MetricsRegistry) -> Collection:
    """Provide an empty ``users`` collection over the memory store."""
    return Collection(memory_store, "users", metrics=metrics_registry)


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests")
