"""Document store port - the storage boundary of the engine.

This outbound port defines the narrow contract the engine needs from the
persistence layer. The store knows nothing about filters or update
operators: it stores, fetches, enumerates and deletes whole documents by
collection name and identity. All query semantics live above this port.

Documents cross the boundary as plain JSON-compatible dicts. Documents
returned by the store carry their ``_id``; documents handed to
``put_at`` do not.

References:
    - doc_engine.application.collection (the only caller)
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class DocumentStorePort(Protocol):
    """Protocol for document persistence.

    Thread Safety:
        Each call is a single round-trip. No call spans another; the
        engine's find-then-write sequences are not atomic.
    """

    @abstractmethod
    def put(self, collection: str, document: dict[str, Any]) -> str:
        """Persist a new document.

        The document's ``_id`` is used when present, otherwise the store
        assigns one. The collection is created on first insert.

        Args:
            collection: Collection name.
            document: Document to store.

        Returns:
            The identity of the stored document.

        Raises:
            EncodingError: If the document cannot be encoded.
            StoreError: If the identity already exists or the write fails.
        """
        ...

    @abstractmethod
    def get_by_identity(self, collection: str, identity: str) -> dict[str, Any] | None:
        """Fetch one document by identity.

        Returns:
            The document including ``_id``, or None if not found.

        Raises:
            EncodingError: If the stored document cannot be decoded.
            StoreError: If the read fails.
        """
        ...

    @abstractmethod
    def put_at(self, collection: str, identity: str, document: dict[str, Any]) -> None:
        """Overwrite an existing document.

        Args:
            collection: Collection name.
            identity: Identity of the document to overwrite.
            document: New field values, without ``_id``.

        Raises:
            EncodingError: If the document cannot be encoded.
            StoreError: If no document has this identity or the write fails.
        """
        ...

    @abstractmethod
    def delete_by_identity(self, collection: str, identity: str) -> int:
        """Delete one document by identity.

        Returns:
            1 if a document was deleted, 0 if none had this identity.

        Raises:
            StoreError: If the delete fails.
        """
        ...

    @abstractmethod
    def scan_all(self, collection: str) -> list[dict[str, Any]]:
        """Materialize every document of a collection, unfiltered.

        Returns:
            Documents in insertion order. An unknown collection is empty.
        """
        ...

    @abstractmethod
    def count(self, collection: str) -> int:
        """Number of documents in a collection."""
        ...

    @abstractmethod
    def list_collections(self) -> list[tuple[str, int]]:
        """List (name, document count) pairs for every collection."""
        ...

    @abstractmethod
    def flush(self) -> None:
        """Durability barrier.

        Raises:
            StoreError: If the store is closed or the flush fails.
        """
        ...

    @abstractmethod
    def close(self) -> None:
        """Release the store. Closing twice is allowed."""
        ...
