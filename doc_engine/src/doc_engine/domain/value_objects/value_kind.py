"""Classification and kind-strict comparison of document values.

Document values are dynamically typed: null, boolean, integer, float,
string, sequence or mapping. Comparisons dispatch on a closed ValueKind
instead of Python's own operators, because Python happily treats
``True == 1`` and ``1 == 1.0`` as equal, while documents must only compare
equal (or ordered) when both sides share the same concrete kind.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any


class ValueKind(Enum):
    """Concrete kinds a document value can take."""

    NULL = "null"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    OTHER = "other"

    @property
    def is_numeric(self) -> bool:
        """Whether the kind is one of the numeric kinds."""
        return self in (ValueKind.INT, ValueKind.FLOAT)

    @property
    def is_ordered(self) -> bool:
        """Whether two values of this kind support ordering comparisons."""
        return self in (ValueKind.INT, ValueKind.FLOAT, ValueKind.STRING)


def kind_of(value: Any) -> ValueKind:
    """Classify a value.

    ``bool`` is checked before ``int`` since it is an ``int`` subclass.
    """
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOL
    if isinstance(value, int):
        return ValueKind.INT
    if isinstance(value, float):
        return ValueKind.FLOAT
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, (list, tuple)):
        return ValueKind.SEQUENCE
    if isinstance(value, Mapping):
        return ValueKind.MAPPING
    return ValueKind.OTHER


def is_number(value: Any) -> bool:
    """Return True for ints and floats, but not bools."""
    return kind_of(value).is_numeric


def is_sequence(value: Any) -> bool:
    """Return True for lists and tuples."""
    return kind_of(value) is ValueKind.SEQUENCE


def values_equal(left: Any, right: Any) -> bool:
    """Deep structural equality that never crosses kinds.

    Sequences are equal when they have the same length and pairwise equal
    elements. Mappings are equal when they have the same keys and equal
    values for every key; key order is irrelevant.
    """
    kind = kind_of(left)
    if kind is not kind_of(right):
        return False

    if kind is ValueKind.SEQUENCE:
        if len(left) != len(right):
            return False
        return all(values_equal(a, b) for a, b in zip(left, right))

    if kind is ValueKind.MAPPING:
        if left.keys() != right.keys():
            return False
        return all(values_equal(left[key], right[key]) for key in left)

    if kind is ValueKind.OTHER and type(left) is not type(right):
        return False

    return left == right


def compare_values(left: Any, right: Any) -> int | None:
    """Order two values of the same ordered kind.

    Returns:
        -1, 0 or 1 when both values are ints, both floats or both strings;
        None for any other pairing, or when a float operand is NaN, meaning
        "not comparable".
    """
    kind = kind_of(left)
    if kind is not kind_of(right) or not kind.is_ordered:
        return None
    if left < right:
        return -1
    if left > right:
        return 1
    if left == right:
        return 0
    # NaN is neither below, above nor equal to anything.
    return None
