"""Adapters layer - concrete implementations of port interfaces.

Adapters provide the actual implementations:
- Outbound adapters: Implement the document store (memory, files)
"""

from doc_engine.adapters.outbound import (
    FileDocumentStore,
    InMemoryDocumentStore,
)

__all__ = [
    # Outbound adapters
    "FileDocumentStore",
    "InMemoryDocumentStore",
]
