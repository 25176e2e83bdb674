"""Unit tests for domain value objects - identifiers."""

from __future__ import annotations

import pytest

from doc_engine.domain.value_objects import IDENTITY_FIELD, OPERATOR_SIGIL, DocumentId


class TestConstants:
    """Tests for reserved names."""

    def test_identity_field(self) -> None:
        assert IDENTITY_FIELD == "_id"

    def test_operator_sigil(self) -> None:
        assert OPERATOR_SIGIL == "$"


class TestDocumentId:
    """Tests for DocumentId value object."""

    def test_creation(self) -> None:
        """DocumentId wraps a string."""
        doc_id = DocumentId("abc")
        assert doc_id.value == "abc"
        assert str(doc_id) == "abc"

    def test_generate_is_unique(self) -> None:
        """Generated ids are 32 hex characters and distinct."""
        ids = {DocumentId.generate().value for _ in range(100)}
        assert len(ids) == 100
        assert all(len(i) == 32 for i in ids)

    def test_rejects_non_string(self) -> None:
        with pytest.raises(TypeError):
            DocumentId(42)  # type: ignore[arg-type]

    def test_rejects_empty(self) -> None:
        with pytest.raises(ValueError):
            DocumentId("")

    def test_rejects_too_long(self) -> None:
        with pytest.raises(ValueError):
            DocumentId("x" * 257)

    def test_immutable_and_hashable(self) -> None:
        doc_id = DocumentId("abc")
        with pytest.raises(AttributeError):
            doc_id.value = "other"  # type: ignore[misc]
        assert {doc_id, DocumentId("abc")} == {doc_id}
