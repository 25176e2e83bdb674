"""Client - unified entry point for the document engine.

The client owns a document store and hands out the database that sits on
top of it.

Usage:
    from doc_engine.application import Client

    with Client.connect("/path/to/data") as client:
        users = client.database().collection("users")
        users.insert_one({"name": "Alice", "age": 30})
        client.sync()

    # Ephemeral, for tests and scratch work
    client = Client.connect(":memory:")
"""

from __future__ import annotations

from pathlib import Path
from types import TracebackType
from typing import Self

from doc_engine.adapters.outbound import FileDocumentStore, InMemoryDocumentStore
from doc_engine.application.database import Database
from doc_engine.infrastructure.config import Config
from doc_engine.infrastructure.logging import get_logger
from doc_engine.infrastructure.metrics import MetricsRegistry
from doc_engine.infrastructure.observability import setup_observability
from doc_engine.ports.outbound import DocumentStorePort

logger = get_logger(__name__)

MEMORY_PATH = ":memory:"


class Client:
    """Connection to a document store.

    Closing the client closes the store; a closed client rejects sync().
    close() may be called more than once.
    """

    def __init__(self, store: DocumentStorePort, metrics: MetricsRegistry | None = None) -> None:
        self._store = store
        self._database = Database(store, metrics=metrics)
        self._closed = False

    @classmethod
    def connect(cls, path: str | Path | None = None) -> Client:
        """Open the store at ``path``, creating it if needed.

        ``None`` or ``":memory:"`` gives an in-memory store.
        """
        if path is None or str(path) == MEMORY_PATH:
            return cls(InMemoryDocumentStore())
        return cls(FileDocumentStore(path, create_if_missing=True))

    @classmethod
    def open(cls, path: str | Path) -> Client:
        """Open an existing store.

        Raises:
            StoreError: If there is no store at ``path``
        """
        return cls(FileDocumentStore(path, create_if_missing=False))

    @classmethod
    def create(cls, path: str | Path) -> Client:
        """Create a store at ``path`` (or open it if it already exists)."""
        return cls(FileDocumentStore(path, create_if_missing=True))

    @classmethod
    def from_config(cls, config: Config) -> Client:
        """Build a client, its store and its observability from configuration."""
        metrics = setup_observability(config.observability)
        config.ensure_directories()

        store: DocumentStorePort
        if config.storage.backend == "file":
            store = FileDocumentStore(
                config.storage.data_dir,
                create_if_missing=True,
                fsync=config.storage.fsync_on_flush,
            )
        else:
            store = InMemoryDocumentStore()

        logger.info("client_created", backend=config.storage.backend)
        return cls(store, metrics=metrics)

    @property
    def store(self) -> DocumentStorePort:
        return self._store

    @property
    def is_closed(self) -> bool:
        return self._closed

    def database(self) -> Database:
        """Return the database backed by this client's store."""
        return self._database

    def sync(self) -> None:
        """Make every write so far durable.

        Raises:
            StoreError: If the client is closed or the flush fails
        """
        self._store.flush()

    def close(self) -> None:
        """Flush and close the store. Safe to call again.

        If the final flush fails the client stays open, so close() can be
        retried.
        """
        if self._closed:
            return
        self._store.close()
        self._closed = True
        logger.info("client_closed")

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
