"""Domain services for the document engine.

Exports:
    Filter evaluation:
        - parse_filter: Parse a filter mapping into an expression tree
        - matches: Decide whether a document matches a filter
        - identity_lookup: Detect the bare ``{"_id": ...}`` filter shape
        - FilterExpression, Comparison, Logical, Unknown: Expression nodes
        - ComparisonOp, LogicalOp: Operator enumerations

    Update application:
        - parse_update: Parse an update mapping into Operations or Replacement
        - apply_update: Produce a new document from an update
        - UpdateOp, UpdateOperation, Operations, Replacement: Update model
"""

from doc_engine.domain.services.filter_evaluator import (
    MATCH_ALL,
    Comparison,
    ComparisonOp,
    FilterExpression,
    Logical,
    LogicalOp,
    Unknown,
    evaluate_comparison,
    identity_lookup,
    is_operator_mapping,
    matches,
    parse_filter,
)
from doc_engine.domain.services.update_applier import (
    Operations,
    Replacement,
    UpdateExpression,
    UpdateOp,
    UpdateOperation,
    apply_update,
    is_replacement,
    parse_update,
)

__all__ = [
    "MATCH_ALL",
    "Comparison",
    "ComparisonOp",
    "FilterExpression",
    "Logical",
    "LogicalOp",
    "Unknown",
    "evaluate_comparison",
    "identity_lookup",
    "is_operator_mapping",
    "matches",
    "parse_filter",
    "Operations",
    "Replacement",
    "UpdateExpression",
    "UpdateOp",
    "UpdateOperation",
    "apply_update",
    "is_replacement",
    "parse_update",
]
