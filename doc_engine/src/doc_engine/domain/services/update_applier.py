"""Application of MongoDB-style update expressions to documents.

An update is parsed once into one of two shapes:

- Operations: a flat, ordered list of field operations taken from the
  update's operator blocks ($set, $unset, $inc, $push). Blocks are applied
  in the update's key order and fields in each block's key order, so a
  later operation sees the effect of an earlier one.
- Replacement: the update contains at least one key without the "$" sigil.
  The whole update then replaces the document, keeping only its identity.
  Operator keys next to a plain key are ignored.

Application never mutates its input and always restores the original
``_id``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from doc_engine.domain.entities import Document
from doc_engine.domain.value_objects import (
    IDENTITY_FIELD,
    OPERATOR_SIGIL,
    is_number,
    is_sequence,
)
from doc_engine.infrastructure.logging import get_logger

logger = get_logger(__name__)


class UpdateOp(Enum):
    """Supported update operators."""

    SET = "$set"
    UNSET = "$unset"
    INC = "$inc"
    PUSH = "$push"


_UPDATE_OPS = {op.value: op for op in UpdateOp}


@dataclass(frozen=True)
class UpdateOperation:
    """A single field operation."""

    op: UpdateOp
    field: str
    value: Any = None

    def apply_to(self, document: Document) -> None:
        """Apply the operation to a working copy in place."""
        if self.op is UpdateOp.SET:
            document[self.field] = self.value
        elif self.op is UpdateOp.UNSET:
            document.pop(self.field, None)
        elif self.op is UpdateOp.INC:
            current = document.get(self.field)
            if is_number(current):
                document[self.field] = current + self.value
            else:
                document[self.field] = self.value
        elif self.op is UpdateOp.PUSH:
            current = document.get(self.field)
            if is_sequence(current):
                document[self.field] = [*current, self.value]
            else:
                document[self.field] = [self.value]


@dataclass(frozen=True)
class Operations:
    """An operator-style update: ordered field operations."""

    operations: tuple[UpdateOperation, ...] = ()


@dataclass(frozen=True)
class Replacement:
    """A whole-document replacement."""

    fields: Mapping[str, Any]


UpdateExpression = Union[Operations, Replacement]


def is_replacement(update: Mapping[str, Any]) -> bool:
    """Return True if any top-level key lacks the operator sigil."""
    return any(not key.startswith(OPERATOR_SIGIL) for key in update)


def parse_update(update: Mapping[str, Any] | UpdateExpression) -> UpdateExpression:
    """Parse an update mapping.

    Args:
        update: The update document, or an already parsed expression

    Returns:
        Replacement if any top-level key lacks the sigil, else Operations.

    Raises:
        TypeError: If the update is not a mapping.
    """
    if isinstance(update, (Operations, Replacement)):
        return update
    if not isinstance(update, Mapping):
        raise TypeError(f"Update must be a mapping, got {type(update).__name__}")

    if is_replacement(update):
        return Replacement(
            {
                key: value
                for key, value in update.items()
                if not key.startswith(OPERATOR_SIGIL) and key != IDENTITY_FIELD
            }
        )

    operations: list[UpdateOperation] = []
    for op_key, fields in update.items():
        op = _UPDATE_OPS.get(op_key)
        if op is None:
            logger.debug("unknown_update_operator_ignored", operator=op_key)
            continue
        if not isinstance(fields, Mapping):
            logger.debug("malformed_update_operand_ignored", operator=op_key)
            continue
        for field_name, value in fields.items():
            if op is UpdateOp.INC and not is_number(value):
                logger.debug("non_numeric_increment_ignored", field=field_name)
                continue
            operations.append(UpdateOperation(op, field_name, value))
    return Operations(tuple(operations))


def apply_update(
    document: Mapping[str, Any],
    update: Mapping[str, Any] | UpdateExpression,
) -> Document:
    """Produce the new state of a document under an update.

    Args:
        document: The current document; it is not modified
        update: An update mapping or an already parsed expression

    Returns:
        A new Document carrying the original identity.
    """
    expression = parse_update(update)
    identity = document.get(IDENTITY_FIELD)

    if isinstance(expression, Replacement):
        result = Document(expression.fields)
    else:
        result = Document(document)
        for operation in expression.operations:
            operation.apply_to(result)

    result.pop(IDENTITY_FIELD, None)
    if identity is not None:
        result = Document({IDENTITY_FIELD: identity, **result})
    return result
