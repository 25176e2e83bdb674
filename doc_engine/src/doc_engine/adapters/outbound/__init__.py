"""Outbound adapters - implementations of outbound ports.

These adapters implement the document store port, holding documents
in memory or in collection files on the local filesystem.
"""

from doc_engine.adapters.outbound.file_document_store import FileDocumentStore
from doc_engine.adapters.outbound.memory_document_store import InMemoryDocumentStore

__all__ = [
    "FileDocumentStore",
    "InMemoryDocumentStore",
]
