"""Conversion of stored documents into caller-chosen types."""

from __future__ import annotations

from typing import Any

from pydantic import TypeAdapter, ValidationError

from doc_engine.domain.entities import Document
from doc_engine.domain.errors import EncodingError


def decode_as(document: Document, into: Any = None) -> Any:
    """Convert a document.

    Args:
        document: The document to convert; it is not modified
        into: Target type (pydantic model, dataclass, TypedDict, ...).
            None returns an independent deep copy of the document.

    Raises:
        EncodingError: If the target type rejects the document
    """
    if into is None:
        return document.deep_copy()
    try:
        return TypeAdapter(into).validate_python(document.deep_copy())
    except ValidationError as e:
        raise EncodingError(
            f"Cannot decode document {document.id!r} into {into!r}: {e}"
        ) from e
