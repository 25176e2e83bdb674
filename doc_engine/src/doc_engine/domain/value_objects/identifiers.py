"""Document identity value object.

Every stored document carries exactly one reserved identity field. The
identity is a string assigned on insert and never changed afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Self
from uuid import uuid4


IDENTITY_FIELD = "_id"
"""Reserved field holding the document identity."""

OPERATOR_SIGIL = "$"
"""Prefix marking operator keys in filter and update expressions."""


@dataclass(frozen=True, slots=True)
class DocumentId:
    """Immutable, type-safe document identifier.

    Provides:
    - Type safety: Cannot accidentally mix identities with other strings
    - Immutability: IDs cannot be modified after creation
    - Hashability: Can be used in sets and as dict keys
    """

    value: str

    def __post_init__(self) -> None:
        """Validate the ID value."""
        if not isinstance(self.value, str):
            raise TypeError(f"DocumentId must be a string, got {type(self.value).__name__}")
        if not self.value:
            raise ValueError("DocumentId cannot be empty")
        if len(self.value) > 256:
            raise ValueError("DocumentId cannot exceed 256 characters")

    @classmethod
    def generate(cls) -> Self:
        """Generate a new random DocumentId (32 hex characters)."""
        return cls(uuid4().hex)

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"DocumentId({self.value!r})"
