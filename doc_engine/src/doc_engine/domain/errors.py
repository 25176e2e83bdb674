"""Error taxonomy for the document engine.

Evaluation of filters and updates never raises for type mismatches; the
errors below only surface from the store boundary, from explicit decode
calls, and from multi-document batches.
"""

from __future__ import annotations


class DocEngineError(Exception):
    """Base class for all document engine errors."""

    pass


class DocumentNotFoundError(DocEngineError):
    """Raised when a decode is attempted with no current document."""

    pass


class EncodingError(DocEngineError):
    """Raised when a document cannot be encoded or decoded across the store boundary."""

    pass


class StoreError(DocEngineError):
    """Raised when the store boundary reports an operational failure."""

    pass


class PartialBatchError(DocEngineError):
    """Raised when a multi-document operation stops at a per-document failure.

    Effects of the operations that completed before ``index`` are kept.

    Attributes:
        operation: Name of the batch operation (insert_many, update_many, ...)
        index: Position in the batch of the operation that failed
        completed: Number of per-document operations that completed
        inserted_ids: Identities inserted before the failure (insert_many only)
    """

    def __init__(
        self,
        operation: str,
        index: int,
        completed: int,
        cause: BaseException,
        inserted_ids: list[str] | None = None,
    ) -> None:
        self.operation = operation
        self.index = index
        self.completed = completed
        self.inserted_ids = list(inserted_ids or [])
        super().__init__(
            f"{operation} failed at index {index} after {completed} completed "
            f"operation(s): {cause}"
        )
