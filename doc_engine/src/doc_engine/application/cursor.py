"""Cursor over an already-fetched result sequence.

A cursor never talks to the store. It holds the full, filtered sequence
and a skip/limit window over it, plus a position used by advance() and
decode() for one-at-a-time iteration.

Usage:
    cursor = users.find({"age": {"$gte": 18}}).skip(10).limit(10)
    page = cursor.all()

    while cursor.advance():
        user = cursor.decode(User)
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Any, Self

from doc_engine.application.decoding import decode_as
from doc_engine.domain.entities import Document
from doc_engine.domain.errors import DocumentNotFoundError


class Cursor:
    """Paginated view over a materialized list of documents.

    ``skip`` and ``limit`` mutate the cursor and return it, so they chain
    and can be re-applied. The window is recomputed from the full sequence
    on every read. The iteration position is an index into whatever window
    is current; changing skip or limit does not reset it.
    """

    def __init__(self, documents: Sequence[Document]) -> None:
        self._documents: list[Document] = list(documents)
        self._skip = 0
        self._limit: int | None = None
        self._position = 0

    def skip(self, count: int) -> Self:
        """Set how many leading documents to skip.

        Raises:
            ValueError: If count is negative
        """
        if count < 0:
            raise ValueError(f"skip must be non-negative, got {count}")
        self._skip = count
        return self

    def limit(self, count: int) -> Self:
        """Set the maximum number of documents returned. 0 returns none.

        Raises:
            ValueError: If count is negative
        """
        if count < 0:
            raise ValueError(f"limit must be non-negative, got {count}")
        self._limit = count
        return self

    def all(self) -> list[Document]:
        """Return the current window."""
        return list(self._window())

    def advance(self) -> bool:
        """Return True if a document exists at the current position."""
        return self._position < len(self._window())

    def decode(self, into: Any = None) -> Any:
        """Return the document at the current position and move past it.

        Args:
            into: Optional target type, see decode_as

        Raises:
            DocumentNotFoundError: If the cursor is exhausted
            EncodingError: If ``into`` rejects the document
        """
        window = self._window()
        if self._position >= len(window):
            raise DocumentNotFoundError("Cursor has no current document")
        document = window[self._position]
        self._position += 1
        return decode_as(document, into)

    def __iter__(self) -> Iterator[Document]:
        while self.advance():
            yield self.decode()

    def __len__(self) -> int:
        return len(self._window())

    def __repr__(self) -> str:
        return (
            f"Cursor(total={len(self._documents)}, skip={self._skip}, "
            f"limit={self._limit}, position={self._position})"
        )

    def _window(self) -> list[Document]:
        start = min(self._skip, len(self._documents))
        if self._limit is None:
            return self._documents[start:]
        return self._documents[start : start + self._limit]
