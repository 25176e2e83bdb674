"""Ports layer - interface definitions following Hexagonal Architecture.

Ports are abstract interfaces (protocols) that define contracts:
- Outbound ports: Dependencies on external systems (the document store)

Adapters implement these ports with concrete functionality.
"""

from doc_engine.ports.outbound import DocumentStorePort

__all__ = [
    # Outbound ports
    "DocumentStorePort",
]
