"""Database: the namespace that hands out collection handles."""

from __future__ import annotations

import threading

from doc_engine.application.collection import Collection
from doc_engine.infrastructure.metrics import MetricsRegistry
from doc_engine.ports.outbound import DocumentStorePort


class Database:
    """Set of collections sharing one document store.

    Collections are created lazily by the store on first insert; asking
    for a handle never touches storage.

    Example:
        >>> db = client.database()
        >>> db["users"] is db.collection("users")
        True
    """

    def __init__(self, store: DocumentStorePort, metrics: MetricsRegistry | None = None) -> None:
        self._store = store
        self._metrics = metrics
        self._collections: dict[str, Collection] = {}
        self._lock = threading.Lock()

    def collection(self, name: str) -> Collection:
        """Get the handle for a collection, creating it on first use.

        Raises:
            ValueError: If name is empty
        """
        if not isinstance(name, str) or not name:
            raise ValueError("Collection name must be a non-empty string")
        with self._lock:
            handle = self._collections.get(name)
            if handle is None:
                handle = Collection(self._store, name, metrics=self._metrics)
                self._collections[name] = handle
            return handle

    def __getitem__(self, name: str) -> Collection:
        return self.collection(name)

    def list_collection_names(self) -> list[str]:
        """Names of the collections that hold or have held documents."""
        return [name for name, _ in self._store.list_collections()]

    def list_collections(self) -> list[tuple[str, int]]:
        """(name, document count) pairs as reported by the store."""
        return list(self._store.list_collections())
