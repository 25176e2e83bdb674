"""Filter evaluation for MongoDB-style query documents.

A filter is parsed once into a typed expression tree and then evaluated by
structural recursion against each candidate document.

Filter grammar:
    filter      := {clause, ...}                 (conjunction, in key order)
    clause      := "$and": [filter, ...]
                 | "$or":  [filter, ...]
                 | "$<other>": any               (Unknown, always holds)
                 | field: {"$op": operand, ...}  (every operator must hold)
                 | field: literal                (deep equality)

Unknown operators are deliberately lenient: they parse to an Unknown node
that always holds, so a filter written against a newer operator vocabulary
still matches on the clauses this engine understands.

Evaluation is total. A type mismatch between a field and an operand makes
the condition false; it never raises.

Example:
    >>> expr = parse_filter({"age": {"$gte": 26}, "$or": [{"name": "Alice"}]})
    >>> expr.matches({"name": "Alice", "age": 30})
    True
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from doc_engine.domain.value_objects import (
    IDENTITY_FIELD,
    OPERATOR_SIGIL,
    compare_values,
    is_sequence,
    values_equal,
)
from doc_engine.infrastructure.logging import get_logger

logger = get_logger(__name__)


class ComparisonOp(Enum):
    """Field comparison operators."""

    EQ = "$eq"
    NE = "$ne"
    GT = "$gt"
    GTE = "$gte"
    LT = "$lt"
    LTE = "$lte"
    IN = "$in"
    NIN = "$nin"


class LogicalOp(Enum):
    """Operators combining nested filters."""

    AND = "$and"
    OR = "$or"


_COMPARISON_OPS = {op.value: op for op in ComparisonOp}
_LOGICAL_OPS = {op.value: op for op in LogicalOp}


@dataclass(frozen=True)
class FilterExpression(ABC):
    """Base class for parsed filter nodes."""

    @abstractmethod
    def matches(self, document: Mapping[str, Any]) -> bool:
        """Return True if the document satisfies this node."""
        pass

    @abstractmethod
    def __str__(self) -> str:
        pass


@dataclass(frozen=True)
class Comparison(FilterExpression):
    """Comparison of one field's current value against an operand.

    An absent field compares as None.
    """

    field: str
    op: ComparisonOp
    operand: Any

    def matches(self, document: Mapping[str, Any]) -> bool:
        return evaluate_comparison(document.get(self.field), self.op, self.operand)

    def __str__(self) -> str:
        return f"{self.field} {self.op.value} {self.operand!r}"


@dataclass(frozen=True)
class Logical(FilterExpression):
    """Short-circuit conjunction or disjunction of child nodes."""

    op: LogicalOp
    operands: tuple[FilterExpression, ...] = ()

    def matches(self, document: Mapping[str, Any]) -> bool:
        if self.op is LogicalOp.AND:
            for operand in self.operands:
                if not operand.matches(document):
                    return False
            return True

        for operand in self.operands:
            if operand.matches(document):
                return True
        return False

    def __str__(self) -> str:
        joined = f" {self.op.value} ".join(str(o) for o in self.operands)
        return f"({joined})"


@dataclass(frozen=True)
class Unknown(FilterExpression):
    """An operator this engine does not understand. Always holds."""

    key: str
    operand: Any = None

    def matches(self, document: Mapping[str, Any]) -> bool:
        return True

    def __str__(self) -> str:
        return f"Unknown({self.key})"


MATCH_ALL = Logical(LogicalOp.AND, ())


def evaluate_comparison(value: Any, op: ComparisonOp, operand: Any) -> bool:
    """Apply a comparison operator to a field value.

    Args:
        value: The document's current value for the field (None if absent)
        op: The operator to apply
        operand: The operand from the filter

    Returns:
        Whether the condition holds. Mismatched kinds give False for
        equality and ordering, which makes $ne and $nin hold.
    """
    if op is ComparisonOp.EQ:
        return values_equal(value, operand)
    if op is ComparisonOp.NE:
        return not values_equal(value, operand)
    if op is ComparisonOp.IN:
        return _contains(operand, value)
    if op is ComparisonOp.NIN:
        return not _contains(operand, value)

    order = compare_values(value, operand)
    if op is ComparisonOp.GT:
        return order == 1
    if op is ComparisonOp.LT:
        return order == -1
    if op is ComparisonOp.GTE:
        return order in (0, 1) or values_equal(value, operand)
    if op is ComparisonOp.LTE:
        return order in (-1, 0) or values_equal(value, operand)
    return False


def _contains(candidates: Any, value: Any) -> bool:
    """Membership by deep equality; a non-sequence operand contains nothing."""
    if not is_sequence(candidates):
        return False
    return any(values_equal(candidate, value) for candidate in candidates)


def is_operator_mapping(value: Any) -> bool:
    """Return True for a non-empty mapping whose keys all carry the sigil."""
    if not isinstance(value, Mapping) or not value:
        return False
    return all(isinstance(key, str) and key.startswith(OPERATOR_SIGIL) for key in value)


def parse_filter(filter: Mapping[str, Any] | None) -> FilterExpression:
    """Parse a filter mapping into an expression tree.

    Args:
        filter: The filter document. None and {} match every document.

    Returns:
        The root node, a conjunction of the filter's clauses in key order.

    Raises:
        TypeError: If the filter is neither None nor a mapping.
    """
    if filter is None:
        return MATCH_ALL
    if not isinstance(filter, Mapping):
        raise TypeError(f"Filter must be a mapping, got {type(filter).__name__}")
    return Logical(
        LogicalOp.AND,
        tuple(_parse_clause(key, value) for key, value in filter.items()),
    )


def _parse_clause(key: str, value: Any) -> FilterExpression:
    if key.startswith(OPERATOR_SIGIL):
        logical_op = _LOGICAL_OPS.get(key)
        if logical_op is None:
            logger.debug("unknown_filter_operator_ignored", operator=key)
            return Unknown(key, value)
        children = _parse_children(value)
        if children is None:
            logger.debug("malformed_logical_operand_ignored", operator=key)
            return Unknown(key, value)
        return Logical(logical_op, children)

    if is_operator_mapping(value):
        conditions: list[FilterExpression] = []
        for op_key, operand in value.items():
            op = _COMPARISON_OPS.get(op_key)
            if op is None:
                logger.debug("unknown_field_operator_ignored", field=key, operator=op_key)
                conditions.append(Unknown(op_key, operand))
            else:
                conditions.append(Comparison(key, op, operand))
        return Logical(LogicalOp.AND, tuple(conditions))

    return Comparison(key, ComparisonOp.EQ, value)


def _parse_children(value: Any) -> tuple[FilterExpression, ...] | None:
    """Parse the operand of $and/$or; None if it is not a sequence of mappings."""
    if not isinstance(value, Sequence) or isinstance(value, (str, bytes)):
        return None
    if not all(isinstance(item, Mapping) for item in value):
        return None
    return tuple(parse_filter(item) for item in value)


def matches(document: Mapping[str, Any], filter: Mapping[str, Any] | FilterExpression | None) -> bool:
    """Decide whether a document matches a filter.

    Args:
        document: The document to test; it is never modified
        filter: A filter mapping or an already parsed expression

    Returns:
        True if every clause of the filter holds for the document.
    """
    expression = filter if isinstance(filter, FilterExpression) else parse_filter(filter)
    return expression.matches(document)


def identity_lookup(filter: Mapping[str, Any] | None) -> str | None:
    """Return the identity if the filter is exactly ``{"_id": <str>}``.

    Any other shape, including ``{"_id": {"$eq": ...}}``, returns None.
    """
    if not isinstance(filter, Mapping) or len(filter) != 1:
        return None
    identity = filter.get(IDENTITY_FIELD)
    return identity if isinstance(identity, str) else None
