import threading
from datetime import datetime, timezone

import mongomock
import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError, ServerSelectionTimeoutError

import database
from errors import StoreConnectionError


class CountingClient(mongomock.MongoClient):
    created = 0

    def __init__(self, *args, **kwargs):
        type(self).created += 1
        super().__init__()


class UnreachableClient:
    def __init__(self, *args, **kwargs):
        self.admin = self

    def command(self, name):
        raise ServerSelectionTimeoutError("no servers available")


def test_connect_caches_handle(monkeypatch):
    database.reset()
    CountingClient.created = 0
    monkeypatch.setattr(database, "MongoClient", CountingClient)
    monkeypatch.setattr(database.config, "MONGODB_URI", "mongodb://example:27017")

    first = database.connect()
    second = database.connect()

    assert first is second
    assert CountingClient.created == 1


def test_concurrent_first_connect_builds_one_client(monkeypatch):
    database.reset()
    CountingClient.created = 0
    monkeypatch.setattr(database, "MongoClient", CountingClient)
    monkeypatch.setattr(database.config, "MONGODB_URI", "mongodb://example:27017")

    start = threading.Barrier(8)
    handles = []

    def worker():
        start.wait()
        handles.append(database.connect())

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(handles) == 8
    assert all(h is handles[0] for h in handles)
    assert CountingClient.created == 1


def test_connect_without_uri_fails(monkeypatch):
    database.reset()
    monkeypatch.setattr(database.config, "MONGODB_URI", None)
    with pytest.raises(StoreConnectionError):
        database.connect()


def test_connect_to_unreachable_store_fails(monkeypatch):
    database.reset()
    monkeypatch.setattr(database, "MongoClient", UnreachableClient)
    monkeypatch.setattr(database.config, "MONGODB_URI", "mongodb://down:27017")
    with pytest.raises(StoreConnectionError):
        database.connect()
    # nothing half-initialised is cached
    assert database._db is None


def test_create_stamps_and_serializes():
    doc = database.create_document("review", {"coupleName": "A & B"})
    assert isinstance(doc["_id"], str)
    assert doc["createdAt"] == doc["updatedAt"]
    assert database.find_document("review", doc["_id"])["coupleName"] == "A & B"


def test_update_missing_id_never_creates(store):
    assert database.update_document("review", str(ObjectId()), {"place": "Goa"}) is None
    assert database.update_document("review", "not-an-id", {"place": "Goa"}) is None
    assert store["review"].count_documents({}) == 0


def test_update_merges_fields():
    doc = database.create_document("review", {"coupleName": "A & B", "place": "Goa"})
    updated = database.update_document("review", doc["_id"], {"place": "Udaipur"})
    assert updated["coupleName"] == "A & B"
    assert updated["place"] == "Udaipur"
    assert updated["_id"] == doc["_id"]


def test_upsert_by_key_keeps_one_document(store):
    database.upsert_document("section", {"key": "latest"}, {"key": "latest", "order": 1})
    second = database.upsert_document("section", {"key": "latest"}, {"key": "latest", "order": 5})
    assert store["section"].count_documents({}) == 1
    assert second["order"] == 5


def test_upsert_with_empty_filter_is_a_singleton(store):
    database.upsert_document("setting", {}, {"citiesServed": 3})
    database.upsert_document("setting", {}, {"citiesServed": 9})
    assert store["setting"].count_documents({}) == 1
    assert database.find_one("setting")["citiesServed"] == 9


def test_unique_indexes(store):
    store["section"].insert_one({"key": "hero"})
    with pytest.raises(DuplicateKeyError):
        store["section"].insert_one({"key": "hero"})


def test_delete_removes_only_target(store):
    keep = database.create_document("gallery", {"imageUrl": "a"})
    gone = database.create_document("gallery", {"imageUrl": "b"})
    assert database.delete_document("gallery", gone["_id"])["imageUrl"] == "b"
    assert database.delete_document("gallery", gone["_id"]) is None
    assert [d["_id"] for d in database.get_documents("gallery")] == [keep["_id"]]


def test_get_documents_sorts(store):
    store["film"].insert_many([
        {"title": "old", "createdAt": datetime(2023, 1, 1, tzinfo=timezone.utc)},
        {"title": "new", "createdAt": datetime(2024, 1, 1, tzinfo=timezone.utc)},
    ])
    titles = [d["title"] for d in database.get_documents("film", sort=[("createdAt", -1)])]
    assert titles == ["new", "old"]


def test_replace_all_keeps_single_document(store):
    database.create_document("hero", {"imageUrl": "one"})
    database.create_document("hero", {"imageUrl": "two"})
    database.replace_all("hero", {"imageUrl": "three"})
    assert [d["imageUrl"] for d in database.get_documents("hero")] == ["three"]


def test_serialize_nested_object_ids():
    ref = ObjectId()
    out = database.serialize_doc({"_id": ref, "contentIds": [ref], "nested": {"id": ref}})
    assert out == {"_id": str(ref), "contentIds": [str(ref)], "nested": {"id": str(ref)}}
