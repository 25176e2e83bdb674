"""File-based document store adapter.

Implements DocumentStorePort using the local filesystem. Each collection
is one JSON file holding its documents in insertion order. Writes go to
memory first and reach disk on flush() or close(), which makes flush() the
durability barrier of the port.

Usage:
    store = FileDocumentStore("/path/to/data")
    identity = store.put("users", {"name": "Alice"})
    store.flush()

Directory structure:
    data_dir/
        collections/
            users.json
            orders.json
"""

from __future__ import annotations

import os
from pathlib import Path
from urllib.parse import quote, unquote

from doc_engine.adapters.outbound.json_codec import decode_document, encode_document
from doc_engine.adapters.outbound.memory_document_store import InMemoryDocumentStore
from doc_engine.domain.errors import EncodingError, StoreError
from doc_engine.infrastructure.logging import get_logger

logger = get_logger(__name__)

_SUFFIX = ".json"


class FileDocumentStore(InMemoryDocumentStore):
    """File-based implementation of DocumentStorePort.

    Collection files are rewritten whole, through a temporary file and an
    atomic rename. Suitable for single-process use with moderate data sizes.

    Attributes:
        data_dir: Root directory for all storage
    """

    def __init__(
        self,
        data_dir: str | Path,
        create_if_missing: bool = True,
        fsync: bool = True,
    ) -> None:
        """Open or create file storage.

        Args:
            data_dir: Root directory for storage
            create_if_missing: Create the directory tree if it does not exist
            fsync: fsync collection files and the directory on flush

        Raises:
            StoreError: If the directory is missing and create_if_missing is
                False, or an existing collection file cannot be read
        """
        super().__init__()
        self._data_dir = Path(data_dir)
        self._collections_dir = self._data_dir / "collections"
        self._fsync = fsync
        self._dirty: set[str] = set()

        if not self._collections_dir.is_dir():
            if not create_if_missing:
                raise StoreError(f"No document store at {self._data_dir}")
            self._collections_dir.mkdir(parents=True, exist_ok=True)

        self._load()
        logger.info(
            "file_document_store_opened",
            data_dir=str(self._data_dir),
            collections=len(self._collections),
        )

    @property
    def data_dir(self) -> Path:
        """Root data directory."""
        return self._data_dir

    def flush(self) -> None:
        """Write every changed collection to disk.

        Raises:
            StoreError: If the store is closed or a write fails
        """
        with self._lock:
            self._ensure_open()
            self._write_dirty()

    def close(self) -> None:
        """Flush pending changes and close the store."""
        with self._lock:
            if self._closed:
                return
            self._write_dirty()
            self._closed = True
        logger.debug("document_store_closed", adapter="file", data_dir=str(self._data_dir))

    def _mark_dirty(self, collection: str) -> None:
        self._dirty.add(collection)

    def _collection_path(self, collection: str) -> Path:
        """Get file path for a collection."""
        return self._collections_dir / f"{quote(collection, safe='')}{_SUFFIX}"

    def _load(self) -> None:
        """Read every collection file into memory."""
        for path in sorted(self._collections_dir.glob(f"*{_SUFFIX}")):
            name = unquote(path.name[: -len(_SUFFIX)])
            try:
                payload = decode_document(path.read_text(encoding="utf-8"))
            except (OSError, EncodingError) as e:
                raise StoreError(f"Cannot read collection file {path}: {e}") from e
            documents = payload.get("documents", {})
            if not isinstance(documents, dict) or not all(
                isinstance(v, str) for v in documents.values()
            ):
                raise StoreError(f"Corrupt collection file {path}")
            self._collections[name] = {
                identity: encoded for identity, encoded in documents.items()
            }
            logger.debug("collection_loaded", collection=name, count=len(documents))

    def _write_dirty(self) -> None:
        for collection in sorted(self._dirty):
            self._write_collection(collection)
        self._dirty.clear()

    def _write_collection(self, collection: str) -> None:
        path = self._collection_path(collection)
        tmp_path = path.with_name(path.name + ".tmp")
        documents = self._collections.get(collection, {})
        # Documents stay in their encoded form inside the file's JSON object.
        body = _encode_collection(collection, documents)
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(body)
                f.flush()
                if self._fsync:
                    os.fsync(f.fileno())
            os.replace(tmp_path, path)
            if self._fsync:
                self._fsync_directory()
        except OSError as e:
            raise StoreError(f"Cannot write collection {collection!r}: {e}") from e
        logger.debug("collection_flushed", collection=collection, count=len(documents))

    def _fsync_directory(self) -> None:
        try:
            fd = os.open(self._collections_dir, os.O_RDONLY)
        except OSError:
            # Directories cannot be opened on every platform.
            return
        try:
            os.fsync(fd)
        finally:
            os.close(fd)


def _encode_collection(name: str, documents: dict[str, str]) -> str:
    """Serialize a collection whose documents are already JSON-encoded."""
    return encode_document({"name": name, "documents": documents})
