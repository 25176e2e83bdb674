"""JSON encoding of documents at the store boundary."""

from __future__ import annotations

import json
from typing import Any

from doc_engine.domain.errors import EncodingError


def encode_document(document: dict[str, Any]) -> str:
    """Encode a document as compact JSON.

    Raises:
        EncodingError: If a value is not JSON-serializable or is NaN/Infinity.
    """
    try:
        return json.dumps(document, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError) as e:
        raise EncodingError(f"Cannot encode document: {e}") from e


def decode_document(data: str | bytes) -> dict[str, Any]:
    """Decode a JSON document.

    Raises:
        EncodingError: If the data is not valid JSON or not a JSON object.
    """
    try:
        document = json.loads(data)
    except ValueError as e:
        raise EncodingError(f"Cannot decode document: {e}") from e
    if not isinstance(document, dict):
        raise EncodingError(f"Expected a JSON object, got {type(document).__name__}")
    return document
