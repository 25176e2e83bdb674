"""Application layer - client, database, collection and cursor."""

from doc_engine.application.client import Client
from doc_engine.application.collection import Collection
from doc_engine.application.cursor import Cursor
from doc_engine.application.database import Database
from doc_engine.application.decoding import decode_as
from doc_engine.application.results import (
    DeleteResult,
    InsertManyResult,
    InsertOneResult,
    SingleResult,
    UpdateResult,
)

__all__ = [
    "Client",
    "Collection",
    "Cursor",
    "Database",
    "decode_as",
    "DeleteResult",
    "InsertManyResult",
    "InsertOneResult",
    "SingleResult",
    "UpdateResult",
]
