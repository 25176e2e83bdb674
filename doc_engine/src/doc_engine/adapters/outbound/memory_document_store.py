"""In-memory document store adapter.

A simple in-memory implementation of DocumentStorePort for testing
and development purposes. Data is not persisted across restarts.

Documents are held JSON-encoded, so every read returns a fresh copy and
values that could not cross a real storage boundary are rejected on write.

Usage:
    store = InMemoryDocumentStore()
    identity = store.put("users", {"name": "Alice"})
    doc = store.get_by_identity("users", identity)
"""

from __future__ import annotations

import threading
from typing import Any

from doc_engine.adapters.outbound.json_codec import decode_document, encode_document
from doc_engine.domain.errors import EncodingError, StoreError
from doc_engine.domain.value_objects import IDENTITY_FIELD, DocumentId
from doc_engine.infrastructure.logging import get_logger

logger = get_logger(__name__)


class InMemoryDocumentStore:
    """In-memory implementation of DocumentStorePort.

    Collections map identities to encoded documents in insertion order.
    A re-entrant lock makes each individual call atomic; sequences of
    calls are not.
    """

    def __init__(self) -> None:
        """Initialize empty storage."""
        self._collections: dict[str, dict[str, str]] = {}
        self._lock = threading.RLock()
        self._closed = False

    def put(self, collection: str, document: dict[str, Any]) -> str:
        """Store a new document, assigning an identity if it has none.

        Args:
            collection: Collection name
            document: Document to store

        Returns:
            The document identity

        Raises:
            EncodingError: If the document or its identity cannot be encoded
            StoreError: If the identity already exists
        """
        with self._lock:
            self._ensure_open()
            identity = self._resolve_identity(document.get(IDENTITY_FIELD))
            if identity in self._collections.get(collection, {}):
                raise StoreError(
                    f"Duplicate identity {identity!r} in collection {collection!r}"
                )
            encoded = encode_document({**document, IDENTITY_FIELD: identity})
            self._collections.setdefault(collection, {})[identity] = encoded
            self._mark_dirty(collection)
            return identity

    def get_by_identity(self, collection: str, identity: str) -> dict[str, Any] | None:
        """Load a document by identity.

        Returns:
            The document, or None if not found
        """
        with self._lock:
            self._ensure_open()
            encoded = self._collections.get(collection, {}).get(identity)
        return decode_document(encoded) if encoded is not None else None

    def put_at(self, collection: str, identity: str, document: dict[str, Any]) -> None:
        """Overwrite an existing document.

        Raises:
            StoreError: If no document has this identity
        """
        with self._lock:
            self._ensure_open()
            docs = self._collections.get(collection)
            if docs is None or identity not in docs:
                raise StoreError(
                    f"Document {identity!r} not found in collection {collection!r}"
                )
            fields = {k: v for k, v in document.items() if k != IDENTITY_FIELD}
            docs[identity] = encode_document({IDENTITY_FIELD: identity, **fields})
            self._mark_dirty(collection)

    def delete_by_identity(self, collection: str, identity: str) -> int:
        """Delete a document by identity.

        Returns:
            1 if deleted, 0 if not found
        """
        with self._lock:
            self._ensure_open()
            docs = self._collections.get(collection)
            if docs is None or identity not in docs:
                return 0
            del docs[identity]
            self._mark_dirty(collection)
            return 1

    def scan_all(self, collection: str) -> list[dict[str, Any]]:
        """Return every document of a collection in insertion order."""
        with self._lock:
            self._ensure_open()
            encoded = list(self._collections.get(collection, {}).values())
        return [decode_document(data) for data in encoded]

    def count(self, collection: str) -> int:
        """Number of documents in a collection."""
        with self._lock:
            self._ensure_open()
            return len(self._collections.get(collection, {}))

    def list_collections(self) -> list[tuple[str, int]]:
        """List (name, count) pairs in creation order."""
        with self._lock:
            self._ensure_open()
            return [(name, len(docs)) for name, docs in self._collections.items()]

    def flush(self) -> None:
        """Nothing to flush for memory storage."""
        with self._lock:
            self._ensure_open()

    def close(self) -> None:
        """Mark the store closed. Further calls raise StoreError."""
        with self._lock:
            self._closed = True
        logger.debug("document_store_closed", adapter="memory")

    def _ensure_open(self) -> None:
        if self._closed:
            raise StoreError("Document store is closed")

    def _mark_dirty(self, collection: str) -> None:
        """Hook for persistent subclasses; memory storage has nothing to track."""
        pass

    @staticmethod
    def _resolve_identity(identity: Any) -> str:
        if identity is None:
            return DocumentId.generate().value
        try:
            return DocumentId(identity).value
        except (TypeError, ValueError) as e:
            raise EncodingError(f"Invalid document identity: {e}") from e
