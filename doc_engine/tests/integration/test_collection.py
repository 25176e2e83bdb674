"""Integration tests for Collection over a real store adapter."""

from __future__ import annotations

from typing import Any

import pytest
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from pydantic import BaseModel

from doc_engine.adapters.outbound import InMemoryDocumentStore
from doc_engine.application import Collection
from doc_engine.domain.errors import (
    DocumentNotFoundError,
    EncodingError,
    PartialBatchError,
    StoreError,
)
from doc_engine.infrastructure.metrics import MetricsRegistry


class User(BaseModel):
    name: str
    age: int


class SpyStore(InMemoryDocumentStore):
    """Memory store that records which boundary calls were made."""

    def __init__(self) -> None:
        super().__init__()
        self.calls: list[str] = []

    def get_by_identity(self, collection: str, identity: str) -> dict[str, Any] | None:
        self.calls.append("get_by_identity")
        return super().get_by_identity(collection, identity)

    def scan_all(self, collection: str) -> list[dict[str, Any]]:
        self.calls.append("scan_all")
        return super().scan_all(collection)

    def count(self, collection: str) -> int:
        self.calls.append("count")
        return super().count(collection)


class FailingStore(InMemoryDocumentStore):
    """Memory store whose nth write or delete raises StoreError."""

    def __init__(self, fail_on: int) -> None:
        super().__init__()
        self.fail_on = fail_on
        self.writes = 0

    def _tick(self) -> None:
        self.writes += 1
        if self.writes == self.fail_on:
            raise StoreError("disk full")

    def put_at(self, collection: str, identity: str, document: dict[str, Any]) -> None:
        self._tick()
        super().put_at(collection, identity, document)

    def delete_by_identity(self, collection: str, identity: str) -> int:
        self._tick()
        return super().delete_by_identity(collection, identity)


def sample_value(registry: MetricsRegistry, name: str, labels: dict[str, str]) -> float | None:
    return registry._registry.get_sample_value(name, labels)


@pytest.mark.integration
class TestAliceBobScenario:
    """End-to-end scenario over the memory store."""

    def test_scenario(self, users: Collection) -> None:
        alice_id = users.insert_one({"name": "Alice", "age": 30}).inserted_id
        users.insert_one({"name": "Bob", "age": 25})

        assert users.count_documents({}) == 2

        found = users.find_one({"name": "Alice"}).decode()
        assert found == {"_id": alice_id, "name": "Alice", "age": 30}

        result = users.update_one({"name": "Alice"}, {"$set": {"age": 31}})
        assert (result.matched_count, result.modified_count) == (1, 1)
        assert users.find_one({"_id": alice_id}).decode()["age"] == 31

        older = users.find({"age": {"$gt": 26}}).all()
        assert [d["name"] for d in older] == ["Alice"]

        either = users.find({"$or": [{"name": "Bob"}, {"age": {"$gte": 31}}]}).all()
        assert len(either) == 2

        assert users.delete_one({"name": "Bob"}).deleted_count == 1
        assert users.count_documents({}) == 1
        assert users.count_documents({"name": "Bob"}) == 0


@pytest.mark.integration
class TestInsert:
    """Tests for insert_one and insert_many."""

    def test_insert_with_given_identity(self, users: Collection) -> None:
        assert users.insert_one({"_id": "u1", "name": "Alice"}).inserted_id == "u1"

    def test_insert_rejects_non_string_identity(self, users: Collection) -> None:
        with pytest.raises(EncodingError):
            users.insert_one({"_id": 1, "name": "Alice"})

    def test_insert_rejects_non_mapping(self, users: Collection) -> None:
        with pytest.raises(EncodingError):
            users.insert_one(["name", "Alice"])  # type: ignore[arg-type]
        assert users.count_documents({}) == 0

    def test_insert_many_non_mapping_element(self, users: Collection) -> None:
        """A bad element stops the batch and reports what was inserted."""
        with pytest.raises(PartialBatchError) as exc_info:
            users.insert_many([{"_id": "a", "n": 1}, None, {"_id": "c"}])  # type: ignore[list-item]

        error = exc_info.value
        assert error.index == 1
        assert error.completed == 1
        assert error.inserted_ids == ["a"]
        assert isinstance(error.__cause__, EncodingError)
        assert users.count_documents({}) == 1

    def test_insert_does_not_mutate_input(self, users: Collection) -> None:
        document = {"name": "Alice"}
        users.insert_one(document)
        assert document == {"name": "Alice"}

    def test_insert_many(self, users: Collection) -> None:
        result = users.insert_many([{"n": i} for i in range(3)])
        assert len(result.inserted_ids) == 3
        assert users.count_documents({}) == 3

    def test_insert_many_partial_failure(
        self, users: Collection, metrics_registry: MetricsRegistry
    ) -> None:
        with pytest.raises(PartialBatchError) as exc_info:
            users.insert_many([{"_id": "a"}, {"_id": "b"}, {"_id": "a"}, {"_id": "c"}])

        error = exc_info.value
        assert error.operation == "insert_many"
        assert error.index == 2
        assert error.completed == 2
        assert error.inserted_ids == ["a", "b"]
        assert isinstance(error.__cause__, StoreError)
        assert users.count_documents({}) == 2
        assert sample_value(
            metrics_registry,
            "docengine_partial_batch_failures_total",
            {"operation": "insert_many"},
        ) == 1.0


@pytest.mark.integration
class TestFind:
    """Tests for find, find_one and count_documents."""

    def test_identity_fast_path(self, metrics_registry: MetricsRegistry) -> None:
        store = SpyStore()
        users = Collection(store, "users", metrics=metrics_registry)
        identity = users.insert_one({"name": "Alice"}).inserted_id

        assert users.find_one({"_id": identity}).found
        assert store.calls == ["get_by_identity"]
        assert sample_value(
            metrics_registry, "docengine_identity_lookups_total", {"collection": "users"}
        ) == 1.0

    def test_other_identity_shapes_scan(self, metrics_registry: MetricsRegistry) -> None:
        store = SpyStore()
        users = Collection(store, "users", metrics=metrics_registry)
        identity = users.insert_one({"name": "Alice"}).inserted_id

        assert users.find_one({"_id": {"$eq": identity}}).found
        assert store.calls == ["scan_all"]

    def test_missing_identity(self, users: Collection) -> None:
        result = users.find_one({"_id": "nope"})
        assert not result.found
        with pytest.raises(DocumentNotFoundError):
            result.decode()

    def test_find_one_returns_first_in_store_order(self, users: Collection) -> None:
        users.insert_many([{"_id": "b", "k": 1}, {"_id": "a", "k": 1}])
        assert users.find_one({"k": 1}).decode()["_id"] == "b"

    def test_find_one_decode_into_model(self, users: Collection) -> None:
        users.insert_one({"name": "Alice", "age": 30})
        assert users.find_one({"name": "Alice"}).decode(User) == User(name="Alice", age=30)

    def test_find_with_pagination(self, users: Collection) -> None:
        users.insert_many([{"n": i} for i in range(10)])
        page = users.find({"n": {"$gte": 2}}).skip(3).limit(2).all()
        assert [d["n"] for d in page] == [5, 6]

    def test_find_all(self, users: Collection) -> None:
        users.insert_many([{"n": i} for i in range(4)])
        assert len(users.find().all()) == 4
        assert len(users.find({}).all()) == 4

    def test_count_empty_filter_uses_store_count(self, metrics_registry: MetricsRegistry) -> None:
        store = SpyStore()
        users = Collection(store, "users", metrics=metrics_registry)
        users.insert_many([{"n": 1}, {"n": 2}])

        assert users.count_documents({}) == 2
        assert users.count_documents({"n": 2}) == 1
        assert store.calls == ["count", "scan_all"]

    def test_scan_metrics(self, users: Collection, metrics_registry: MetricsRegistry) -> None:
        users.insert_many([{"n": i} for i in range(3)])
        users.find({"n": 1})
        assert sample_value(
            metrics_registry, "docengine_documents_scanned_total", {"collection": "users"}
        ) == 3.0
        assert sample_value(
            metrics_registry,
            "docengine_operations_total",
            {"operation": "find", "status": "success"},
        ) == 1.0

    def test_empty_collection(self, users: Collection) -> None:
        assert users.find({"x": 1}).all() == []
        assert users.count_documents({}) == 0


@pytest.mark.integration
class TestUpdate:
    """Tests for update_one and update_many."""

    def test_update_no_match(self, users: Collection) -> None:
        result = users.update_one({"name": "Nobody"}, {"$set": {"a": 1}})
        assert (result.matched_count, result.modified_count) == (0, 0)

    def test_update_one_touches_only_first(self, users: Collection) -> None:
        users.insert_many([{"_id": "a", "k": 1}, {"_id": "b", "k": 1}])
        users.update_one({"k": 1}, {"$inc": {"k": 1}})
        assert [d["k"] for d in users.find().all()] == [2, 1]

    def test_replacement_keeps_identity(self, users: Collection) -> None:
        users.insert_one({"_id": "a", "name": "Alice", "age": 30})
        users.update_one({"_id": "a"}, {"name": "Alicia", "_id": "evil"})
        assert users.find_one({"_id": "a"}).decode() == {"_id": "a", "name": "Alicia"}
        assert users.find_one({"_id": "evil"}).document is None

    def test_update_many(self, users: Collection) -> None:
        users.insert_many([{"n": i, "even": i % 2 == 0} for i in range(6)])
        result = users.update_many({"even": True}, {"$push": {"tags": "even"}})

        assert (result.matched_count, result.modified_count) == (3, 3)
        assert users.count_documents({"tags": ["even"]}) == 3

    def test_update_many_partial_failure(self, metrics_registry: MetricsRegistry) -> None:
        store = FailingStore(fail_on=2)
        users = Collection(store, "users", metrics=metrics_registry)
        users.insert_many([{"_id": str(i), "n": 0} for i in range(3)])

        with pytest.raises(PartialBatchError) as exc_info:
            users.update_many({}, {"$inc": {"n": 1}})

        assert exc_info.value.index == 1
        assert exc_info.value.completed == 1
        assert [d["n"] for d in users.find().all()] == [1, 0, 0]
        assert sample_value(
            metrics_registry,
            "docengine_operations_total",
            {"operation": "update_many", "status": "error"},
        ) == 1.0

    def test_unencodable_update(self, users: Collection) -> None:
        users.insert_one({"_id": "a"})
        with pytest.raises(EncodingError):
            users.update_one({"_id": "a"}, {"$set": {"bad": object()}})
        assert users.find_one({"_id": "a"}).decode() == {"_id": "a"}


@pytest.mark.integration
class TestDelete:
    """Tests for delete_one, delete_many and drop."""

    def test_delete_no_match(self, users: Collection) -> None:
        assert users.delete_one({"name": "Nobody"}).deleted_count == 0

    def test_delete_many(self, users: Collection) -> None:
        users.insert_many([{"n": i} for i in range(5)])
        assert users.delete_many({"n": {"$lt": 3}}).deleted_count == 3
        assert users.count_documents({}) == 2

    def test_delete_many_partial_failure(self, metrics_registry: MetricsRegistry) -> None:
        store = FailingStore(fail_on=3)
        users = Collection(store, "users", metrics=metrics_registry)
        users.insert_many([{"n": i} for i in range(4)])

        with pytest.raises(PartialBatchError) as exc_info:
            users.delete_many({})

        assert exc_info.value.index == 2
        assert exc_info.value.completed == 2
        assert users.count_documents({}) == 2

    def test_drop(self, users: Collection) -> None:
        users.insert_many([{"n": i} for i in range(3)])
        assert users.drop().deleted_count == 3
        assert users.count_documents({}) == 0


@pytest.mark.integration
class TestOperationSpans:
    """Each public operation emits one span carrying its result counts."""

    def test_update_many_span(
        self, users: Collection, span_exporter: InMemorySpanExporter
    ) -> None:
        users.insert_many([{"n": i} for i in range(4)])
        span_exporter.clear()

        users.update_many({"n": {"$lt": 2}}, {"$set": {"low": True}})

        (span,) = span_exporter.get_finished_spans()
        assert span.name == "collection.update_many"
        assert span.attributes["db.collection.name"] == "users"
        assert span.attributes["docengine.matched"] == 2
        assert span.attributes["docengine.modified"] == 2

    def test_span_per_operation(
        self, users: Collection, span_exporter: InMemorySpanExporter
    ) -> None:
        users.insert_one({"_id": "a", "n": 1})
        users.find({"n": 1}).all()
        users.count_documents({})
        users.delete_one({"_id": "a"})

        spans = span_exporter.get_finished_spans()
        assert [s.name for s in spans] == [
            "collection.insert_one",
            "collection.find",
            "collection.count_documents",
            "collection.delete_one",
        ]
        assert spans[0].attributes["docengine.inserted"] == 1
        assert spans[1].attributes["docengine.matched"] == 1
        assert spans[3].attributes["docengine.deleted"] == 1

    def test_failed_batch_span_has_no_counts(
        self, users: Collection, span_exporter: InMemorySpanExporter
    ) -> None:
        with pytest.raises(PartialBatchError):
            users.insert_many([{"_id": "a"}, {"_id": "a"}])

        (span,) = span_exporter.get_finished_spans()
        assert span.name == "collection.insert_many"
        assert "docengine.inserted" not in span.attributes
