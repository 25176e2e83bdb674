"""Outbound ports - interfaces for external dependencies.

Outbound ports define contracts for external systems that the
document engine depends on, namely the document store.
"""

from doc_engine.ports.outbound.document_store import DocumentStorePort

__all__ = [
    "DocumentStorePort",
]
