"""
Document store access.

One ``MongoClient`` is created by the application lifespan and the selected
database is handed to route handlers through the ``get_db`` dependency.
Collections are schemaless; the shapes written by the API live in
``schemas.py``.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional, Tuple, Union

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import Depends, HTTPException, Request
from pydantic import BaseModel
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)

USERS = "users"
SUPPLIES = "supplies"
VOLUNTEERS = "volunteer"


def connect(url: str, name: str, timeout_ms: int = 5000) -> Tuple[MongoClient, Database]:
    client = MongoClient(url, tz_aware=True, serverSelectionTimeoutMS=timeout_ms)
    db = client[name]
    try:
        ensure_indexes(db)
    except PyMongoError:
        client.close()
        raise
    logger.info("Connected to MongoDB database %s", name)
    return client, db


def ensure_indexes(db: Database) -> None:
    """Unique emails are enforced by the store, not by a lookup before insert."""
    db[USERS].create_index([("email", ASCENDING)], unique=True, name="users_email_unique")
    db[VOLUNTEERS].create_index([("email", ASCENDING)], unique=True, name="volunteer_email_unique")
    db[SUPPLIES].create_index([("donatedBy", ASCENDING)], name="supplies_donated_by")
    logger.debug("Indexes ensured on %s", db.name)


def optional_db(request: Request) -> Optional[Database]:
    return getattr(request.app.state, "db", None)


def get_db(db: Optional[Database] = Depends(optional_db)) -> Database:
    if db is None:
        raise HTTPException(status_code=500, detail="Database not available")
    return db


def parse_object_id(value: str, label: str = "id") -> ObjectId:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise HTTPException(status_code=400, detail=f"Invalid {label}")


def create_document(db: Database, collection_name: str, data: Union[BaseModel, dict]):
    if isinstance(data, BaseModel):
        data_dict = data.model_dump(exclude_none=True)
    else:
        data_dict = dict(data)
    now = datetime.now(timezone.utc)
    data_dict["created_at"] = now
    data_dict["updated_at"] = now
    return db[collection_name].insert_one(data_dict)


def get_documents(db: Database, collection_name: str, filter_dict: Optional[dict] = None, limit: Optional[int] = None):
    cursor = db[collection_name].find(filter_dict or {})
    if limit:
        cursor = cursor.limit(limit)
    return [serialize_document(doc) for doc in cursor]


def serialize_document(value: Any) -> Any:
    """Render ObjectIds as hex strings, recursing into nested documents."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {k: serialize_document(v) for k, v in value.items()}
    if isinstance(value, list):
        return [serialize_document(v) for v in value]
    return value


def insert_result(result) -> dict:
    return {"acknowledged": result.acknowledged, "insertedId": str(result.inserted_id)}


def update_result(result) -> dict:
    upserted = result.upserted_id
    return {
        "acknowledged": result.acknowledged,
        "matchedCount": result.matched_count,
        "modifiedCount": result.modified_count,
        "upsertedId": str(upserted) if upserted is not None else None,
    }


def delete_result(result) -> dict:
    return {"acknowledged": result.acknowledged, "deletedCount": result.deleted_count}


def describe(db: Optional[Database]) -> dict:
    """Connection diagnostics for the ``/test`` route."""
    response = {
        "backend": "Running",
        "database": "Not Available",
        "database_name": None,
        "connection_status": "Not Connected",
        "collections": [],
    }
    if db is None:
        return response
    response["database_name"] = db.name
    try:
        response["collections"] = sorted(db.list_collection_names())[:10]
    except PyMongoError as e:
        logger.warning("Database diagnostics failed: %s", e)
        response["database"] = f"Connected but Error: {str(e)[:50]}"
        return response
    response["database"] = "Connected & Working"
    response["connection_status"] = "Connected"
    return response
