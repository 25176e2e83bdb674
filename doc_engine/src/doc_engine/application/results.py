"""Result records returned by collection operations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from doc_engine.application.decoding import decode_as
from doc_engine.domain.entities import Document
from doc_engine.domain.errors import DocumentNotFoundError


@dataclass
class InsertOneResult:
    """Result of insert_one."""

    inserted_id: str


@dataclass
class InsertManyResult:
    """Result of insert_many."""

    inserted_ids: list[str] = field(default_factory=list)


@dataclass
class UpdateResult:
    """Result of update_one and update_many.

    ``modified_count`` counts writes, not changed documents: a write that
    leaves a document unchanged still counts.
    """

    matched_count: int = 0
    modified_count: int = 0


@dataclass
class DeleteResult:
    """Result of delete_one and delete_many."""

    deleted_count: int = 0


@dataclass
class SingleResult:
    """Holder for the outcome of find_one.

    Example:
        >>> result = users.find_one({"name": "Alice"})
        >>> if result.found:
        ...     alice = result.decode(User)
    """

    document: Document | None = None

    @property
    def found(self) -> bool:
        return self.document is not None

    def decode(self, into: Any = None) -> Any:
        """Return the matched document, optionally converted to ``into``.

        Raises:
            DocumentNotFoundError: If nothing matched
            EncodingError: If ``into`` rejects the document
        """
        if self.document is None:
            raise DocumentNotFoundError("No document matched the filter")
        return decode_as(self.document, into)
