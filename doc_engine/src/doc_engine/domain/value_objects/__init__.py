"""Value objects for the document engine domain.

Value objects are immutable types that represent domain concepts.
They have no identity - two value objects with the same attributes are equal.

Exports:
    Identifiers:
        - DocumentId: Type-safe document identity
        - IDENTITY_FIELD: The reserved "_id" field
        - OPERATOR_SIGIL: The "$" prefix of operator keys

    Value kinds:
        - ValueKind: Closed classification of document values
        - kind_of: Classify a value
        - values_equal: Kind-strict deep equality
        - compare_values: Kind-strict ordering
"""

from doc_engine.domain.value_objects.identifiers import (
    IDENTITY_FIELD,
    OPERATOR_SIGIL,
    DocumentId,
)
from doc_engine.domain.value_objects.value_kind import (
    ValueKind,
    compare_values,
    is_number,
    is_sequence,
    kind_of,
    values_equal,
)

__all__ = [
    "IDENTITY_FIELD",
    "OPERATOR_SIGIL",
    "DocumentId",
    "ValueKind",
    "compare_values",
    "is_number",
    "is_sequence",
    "kind_of",
    "values_equal",
]
