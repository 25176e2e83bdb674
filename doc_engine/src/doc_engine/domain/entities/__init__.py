"""Domain entities for the document engine.

Exports:
    Document:
        - Document: Field mapping with a reserved identity field
"""

from doc_engine.domain.entities.document import Document

__all__ = ["Document"]
