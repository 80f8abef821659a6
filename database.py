import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pydantic import BaseModel
from pymongo import ASCENDING, MongoClient, ReturnDocument
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

import config
from errors import StoreConnectionError

logger = logging.getLogger(__name__)

_client: Optional[MongoClient] = None
_db: Optional[Database] = None
_lock = threading.Lock()


# ---------------------- Connection ----------------------
def connect() -> Database:
    """Return the process-wide database handle, connecting on first use."""
    global _client, _db
    if _db is not None:
        return _db
    with _lock:
        if _db is None:
            if not config.MONGODB_URI:
                raise StoreConnectionError("MONGODB_URI is not set")
            try:
                client = MongoClient(config.MONGODB_URI, serverSelectionTimeoutMS=config.MONGODB_TIMEOUT_MS)
                client.admin.command("ping")
                db = client[config.MONGODB_DB]
                ensure_indexes(db)
            except PyMongoError as exc:
                logger.error("could not connect to MongoDB: %s", exc)
                raise StoreConnectionError() from exc
            logger.info("connected to MongoDB database %s", config.MONGODB_DB)
            _client, _db = client, db
    return _db


def reset(client: Optional[MongoClient] = None) -> None:
    """Drop the cached handle, or install an already-built client."""
    global _client, _db
    with _lock:
        _client = client
        _db = None
        if client is not None:
            _db = client[config.MONGODB_DB]
            ensure_indexes(_db)


def ensure_indexes(db: Database) -> None:
    db["admin"].create_index([("email", ASCENDING)], unique=True)
    db["section"].create_index([("key", ASCENDING)], unique=True)
    db["section"].create_index([("order", ASCENDING)])


def get_collection(name: str) -> Collection:
    return connect()[name]


# ---------------------- Helpers ----------------------
def now() -> datetime:
    return datetime.now(timezone.utc)


def as_object_id(value: Any) -> Optional[ObjectId]:
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def serialize_doc(doc: Any) -> Any:
    """Render ObjectIds (the `_id` and any references) as strings."""
    if isinstance(doc, ObjectId):
        return str(doc)
    if isinstance(doc, dict):
        return {k: serialize_doc(v) for k, v in doc.items()}
    if isinstance(doc, list):
        return [serialize_doc(v) for v in doc]
    return doc


def _as_dict(data: Any) -> Dict[str, Any]:
    if isinstance(data, BaseModel):
        return data.model_dump()
    return dict(data)


# ---------------------- CRUD ----------------------
def create_document(collection_name: str, data: Any) -> Dict[str, Any]:
    doc = _as_dict(data)
    stamp = now()
    doc["createdAt"] = stamp
    doc["updatedAt"] = stamp
    result = get_collection(collection_name).insert_one(doc)
    doc["_id"] = result.inserted_id
    logger.info("created %s %s", collection_name, result.inserted_id)
    return serialize_doc(doc)


def get_documents(
    collection_name: str,
    filter_dict: Optional[Dict[str, Any]] = None,
    sort: Optional[List[tuple]] = None,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    cursor = get_collection(collection_name).find(filter_dict or {})
    if sort:
        cursor = cursor.sort(sort)
    if limit:
        cursor = cursor.limit(limit)
    return [serialize_doc(d) for d in cursor]


def find_one(
    collection_name: str,
    filter_dict: Optional[Dict[str, Any]] = None,
    sort: Optional[List[tuple]] = None,
) -> Optional[Dict[str, Any]]:
    doc = get_collection(collection_name).find_one(filter_dict or {}, sort=sort)
    return serialize_doc(doc) if doc else None


def find_document(collection_name: str, doc_id: str) -> Optional[Dict[str, Any]]:
    oid = as_object_id(doc_id)
    if oid is None:
        return None
    return find_one(collection_name, {"_id": oid})


def update_document(collection_name: str, doc_id: str, update: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Merge `update` into one document by id. Never creates; None if absent."""
    oid = as_object_id(doc_id)
    if oid is None:
        return None
    return update_one(collection_name, {"_id": oid}, update)


def update_one(collection_name: str, filter_dict: Dict[str, Any], update: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    changes = dict(update)
    changes["updatedAt"] = now()
    doc = get_collection(collection_name).find_one_and_update(
        filter_dict,
        {"$set": changes},
        return_document=ReturnDocument.AFTER,
    )
    return serialize_doc(doc) if doc else None


def upsert_document(collection_name: str, filter_dict: Dict[str, Any], data: Any) -> Dict[str, Any]:
    """
    Atomically update the document matching `filter_dict`, inserting it when
    absent. An empty filter addresses a singleton collection.
    """
    changes = _as_dict(data)
    stamp = now()
    changes["updatedAt"] = stamp
    doc = get_collection(collection_name).find_one_and_update(
        filter_dict,
        {"$set": changes, "$setOnInsert": {"createdAt": stamp}},
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )
    logger.info("upserted %s %s", collection_name, doc.get("_id"))
    return serialize_doc(doc)


def delete_document(collection_name: str, doc_id: str) -> Optional[Dict[str, Any]]:
    """Remove one document by id and return it, or None if there was none."""
    oid = as_object_id(doc_id)
    if oid is None:
        return None
    doc = get_collection(collection_name).find_one_and_delete({"_id": oid})
    if doc:
        logger.info("deleted %s %s", collection_name, oid)
    return serialize_doc(doc) if doc else None


def replace_all(collection_name: str, data: Any) -> Dict[str, Any]:
    """Keep exactly one document: clear the collection, then insert `data`."""
    get_collection(collection_name).delete_many({})
    return create_document(collection_name, data)
