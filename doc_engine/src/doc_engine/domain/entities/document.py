"""Document entity: a stored record of field values plus one identity field."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from doc_engine.domain.value_objects.identifiers import IDENTITY_FIELD


class Document(dict[str, Any]):
    """A field-name to value mapping with a reserved ``_id`` field.

    Documents are transient: they are built when the store returns a record
    and live for one evaluate/apply cycle. A Document compares equal to a
    plain dict with the same items.

    Example:
        >>> doc = Document({"_id": "a1", "name": "Alice"})
        >>> doc.id
        'a1'
        >>> doc.without_identity()
        {'name': 'Alice'}
    """

    __slots__ = ()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Document:
        """Build a Document from any string-keyed mapping."""
        if isinstance(data, Document):
            return data
        return cls(data)

    @property
    def id(self) -> str | None:
        """Return the identity, or None if it is absent or not a string."""
        value = self.get(IDENTITY_FIELD)
        return value if isinstance(value, str) else None

    def without_identity(self) -> dict[str, Any]:
        """Return the fields of the document minus ``_id``, as a plain dict."""
        return {key: value for key, value in self.items() if key != IDENTITY_FIELD}

    def deep_copy(self) -> Document:
        """Copy with nested sequences and mappings duplicated."""
        return Document(copy.deepcopy(dict(self)))

    def __repr__(self) -> str:
        return f"Document({dict.__repr__(self)})"
