"""Collection facade: query and update semantics over the store boundary.

The store only stores, fetches and enumerates whole documents. Every
filter is evaluated here, client-side, after a full scan of the
collection. The one exception is a filter of exactly ``{"_id": <str>}``,
which is served by a point lookup.

Multi-document operations are sequences of single-document store calls.
They are not atomic: a failure part-way raises PartialBatchError and the
effects of the calls that completed are kept.

Usage:
    users = client.database().collection("users")
    users.insert_one({"name": "Alice", "age": 30})
    users.update_one({"name": "Alice"}, {"$inc": {"age": 1}})
    for user in users.find({"age": {"$gt": 18}}):
        print(user["name"])
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from opentelemetry.trace import Span

from doc_engine.application.cursor import Cursor
from doc_engine.application.results import (
    DeleteResult,
    InsertManyResult,
    InsertOneResult,
    SingleResult,
    UpdateResult,
)
from doc_engine.domain.entities import Document
from doc_engine.domain.errors import DocEngineError, EncodingError, PartialBatchError
from doc_engine.domain.services import apply_update, identity_lookup, parse_filter, parse_update
from doc_engine.domain.value_objects import IDENTITY_FIELD
from doc_engine.infrastructure.logging import get_logger
from doc_engine.infrastructure.metrics import MetricsRegistry, get_metrics
from doc_engine.infrastructure.tracing import collection_span, record_result
from doc_engine.ports.outbound import DocumentStorePort

logger = get_logger(__name__)

Filter = Mapping[str, Any]


class Collection:
    """A named group of documents reached through a DocumentStorePort.

    Thread Safety:
        A Collection holds no mutable state of its own. Find-then-write
        sequences are separate store calls, so concurrent writers may lose
        updates.
    """

    def __init__(
        self,
        store: DocumentStorePort,
        name: str,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self._store = store
        self._name = name
        self._metrics = metrics or get_metrics()

    @property
    def name(self) -> str:
        return self._name

    # =========================================================================
    # Inserts
    # =========================================================================

    def insert_one(self, document: Mapping[str, Any]) -> InsertOneResult:
        """Insert a document.

        Args:
            document: Fields to store. A provided ``_id`` must be a string;
                when absent the store assigns one.

        Raises:
            EncodingError: If the document is not a mapping, its ``_id``
                is not a string, or it cannot be encoded
            StoreError: If the store rejects the write
        """
        with self._instrumented("insert_one") as span:
            result = InsertOneResult(inserted_id=self._insert(document))
            record_result(span, inserted=1)
            return result

    def insert_many(self, documents: Iterable[Mapping[str, Any]]) -> InsertManyResult:
        """Insert documents one at a time, in order.

        Raises:
            PartialBatchError: If an insert fails; ``inserted_ids`` lists the
                documents that were stored before it
        """
        with self._instrumented("insert_many") as span:
            result = InsertManyResult()
            for index, document in enumerate(documents):
                try:
                    result.inserted_ids.append(self._insert(document))
                except DocEngineError as e:
                    raise self._partial_batch(
                        "insert_many", index, len(result.inserted_ids), e,
                        inserted_ids=result.inserted_ids,
                    ) from e
            record_result(span, inserted=len(result.inserted_ids))
            logger.info(
                "documents_inserted",
                collection=self._name,
                count=len(result.inserted_ids),
            )
            return result

    # =========================================================================
    # Queries
    # =========================================================================

    def find_one(self, filter: Filter | None = None) -> SingleResult:
        """Return the first document matching the filter, in store order."""
        with self._instrumented("find_one") as span:
            documents = self._locate(filter, first_only=True)
            record_result(span, matched=len(documents))
            return SingleResult(documents[0] if documents else None)

    def find(self, filter: Filter | None = None) -> Cursor:
        """Return a cursor over every document matching the filter."""
        with self._instrumented("find") as span:
            documents = self._locate(filter)
            record_result(span, matched=len(documents))
            return Cursor(documents)

    def count_documents(self, filter: Filter | None = None) -> int:
        """Count matching documents.

        An empty filter uses the store's own count without a scan.
        """
        with self._instrumented("count_documents") as span:
            if not filter:
                count = self._store.count(self._name)
            else:
                count = len(self._locate(filter))
            record_result(span, matched=count)
            return count

    # =========================================================================
    # Updates
    # =========================================================================

    def update_one(self, filter: Filter | None, update: Mapping[str, Any]) -> UpdateResult:
        """Apply an update to the first matching document.

        Args:
            filter: Selects the document; no match is a zero-count result
            update: Operator update (``$set``, ``$unset``, ``$inc``,
                ``$push``) or a replacement document

        Raises:
            EncodingError: If the updated document cannot be encoded
            StoreError: If the document vanished before the write
        """
        with self._instrumented("update_one") as span:
            expression = parse_update(update)
            documents = self._locate(filter, first_only=True)
            result = UpdateResult()
            if documents:
                self._write_update(documents[0], expression)
                result = UpdateResult(matched_count=1, modified_count=1)
            record_result(
                span, matched=result.matched_count, modified=result.modified_count
            )
            return result

    def update_many(self, filter: Filter | None, update: Mapping[str, Any]) -> UpdateResult:
        """Apply an update to every matching document.

        Raises:
            PartialBatchError: If a per-document write fails; earlier writes
                are kept
        """
        with self._instrumented("update_many") as span:
            expression = parse_update(update)
            documents = self._locate(filter)
            result = UpdateResult(matched_count=len(documents))
            for index, document in enumerate(documents):
                try:
                    self._write_update(document, expression)
                except DocEngineError as e:
                    raise self._partial_batch(
                        "update_many", index, result.modified_count, e
                    ) from e
                result.modified_count += 1
            record_result(
                span, matched=result.matched_count, modified=result.modified_count
            )
            logger.info(
                "documents_updated",
                collection=self._name,
                matched=result.matched_count,
                modified=result.modified_count,
            )
            return result

    # =========================================================================
    # Deletes
    # =========================================================================

    def delete_one(self, filter: Filter | None) -> DeleteResult:
        """Delete the first matching document."""
        with self._instrumented("delete_one") as span:
            documents = self._locate(filter, first_only=True)
            result = DeleteResult()
            if documents:
                result.deleted_count = self._delete(documents[0])
            record_result(span, matched=len(documents), deleted=result.deleted_count)
            return result

    def delete_many(self, filter: Filter | None) -> DeleteResult:
        """Delete every matching document.

        Raises:
            PartialBatchError: If a per-document delete fails; earlier
                deletes are kept
        """
        with self._instrumented("delete_many") as span:
            documents = self._locate(filter)
            result = DeleteResult()
            for index, document in enumerate(documents):
                try:
                    result.deleted_count += self._delete(document)
                except DocEngineError as e:
                    raise self._partial_batch(
                        "delete_many", index, result.deleted_count, e
                    ) from e
            record_result(span, matched=len(documents), deleted=result.deleted_count)
            logger.info(
                "documents_deleted",
                collection=self._name,
                matched=len(documents),
                deleted=result.deleted_count,
            )
            return result

    def drop(self) -> DeleteResult:
        """Delete every document in the collection."""
        return self.delete_many({})

    def __repr__(self) -> str:
        return f"Collection(name={self._name!r})"

    # =========================================================================
    # Internals
    # =========================================================================

    def _insert(self, document: Mapping[str, Any]) -> str:
        if not isinstance(document, Mapping):
            raise EncodingError(
                f"Document must be a mapping, got {type(document).__name__}"
            )
        identity = document.get(IDENTITY_FIELD)
        if identity is not None and not isinstance(identity, str):
            raise EncodingError(
                f"{IDENTITY_FIELD} must be a string, got {type(identity).__name__}"
            )
        inserted_id = self._store.put(self._name, dict(document))
        logger.debug("document_inserted", collection=self._name, identity=inserted_id)
        return inserted_id

    def _locate(self, filter: Filter | None, first_only: bool = False) -> list[Document]:
        """Find matching documents, in store order."""
        identity = identity_lookup(filter)
        if identity is not None:
            self._metrics.record_identity_lookup(self._name)
            found = self._store.get_by_identity(self._name, identity)
            return [Document.from_mapping(found)] if found is not None else []

        expression = parse_filter(filter)
        candidates = self._store.scan_all(self._name)
        matched: list[Document] = []
        scanned = 0
        for candidate in candidates:
            scanned += 1
            if expression.matches(candidate):
                matched.append(Document.from_mapping(candidate))
                if first_only:
                    break
        self._metrics.record_scan(self._name, scanned)
        logger.debug(
            "collection_scanned",
            collection=self._name,
            scanned=scanned,
            matched=len(matched),
        )
        return matched

    def _write_update(self, document: Document, update: Any) -> None:
        updated = apply_update(document, update)
        self._store.put_at(self._name, document.id, updated.without_identity())
        logger.debug("document_updated", collection=self._name, identity=document.id)

    def _delete(self, document: Document) -> int:
        deleted = self._store.delete_by_identity(self._name, document.id)
        logger.debug(
            "document_deleted", collection=self._name, identity=document.id, deleted=deleted
        )
        return deleted

    def _partial_batch(
        self,
        operation: str,
        index: int,
        completed: int,
        cause: DocEngineError,
        inserted_ids: list[str] | None = None,
    ) -> PartialBatchError:
        self._metrics.record_partial_batch(operation)
        logger.warning(
            "partial_batch_failure",
            collection=self._name,
            operation=operation,
            index=index,
            completed=completed,
            error=str(cause),
        )
        return PartialBatchError(operation, index, completed, cause, inserted_ids)

    @contextmanager
    def _instrumented(self, operation: str) -> Iterator[Span]:
        """Trace and time one public operation."""
        start = time.perf_counter()
        success = False
        with collection_span(self._name, operation) as span:
            try:
                yield span
                success = True
            finally:
                self._metrics.record_operation(
                    operation, time.perf_counter() - start, success
                )
