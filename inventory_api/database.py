"""
MongoDB access

One client per process; collections are named after the entities
("users", "products", "stocks"). Documents are written with camelCase keys
and `createdAt` / `updatedAt` timestamps.
"""

import logging
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Dict, Optional, Set

from bson import ObjectId
from fastapi import Depends
from pydantic import BaseModel
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database

from .config import Settings, get_settings

logger = logging.getLogger(__name__)

USERS = "users"
PRODUCTS = "products"
STOCKS = "stocks"


def ensure_indexes(db: Database) -> None:
    db[USERS].create_index([("email", ASCENDING)], unique=True)
    db[PRODUCTS].create_index([("name", ASCENDING)], unique=True)


@lru_cache
def connect(database_url: str, database_name: str) -> Database:
    """Return a handle on the database. No server round trip happens here."""
    logger.info("Creating MongoDB client for database %r", database_name)
    client = MongoClient(database_url, tz_aware=True)
    return client[database_name]


_indexed: Set[Database] = set()


def get_database(settings: Settings = Depends(get_settings)) -> Database:
    return connect(settings.database_url, settings.database_name)


def get_db(db: Database = Depends(get_database)) -> Database:
    # Indexes are created on the first request that reaches the server
    if db not in _indexed:
        ensure_indexes(db)
        _indexed.add(db)
    return db


def now() -> datetime:
    return datetime.now(timezone.utc)


def create_document(db: Database, collection_name: str, data: BaseModel) -> ObjectId:
    """Insert a schema instance with timestamps and return its new id."""
    doc = data.model_dump(by_alias=True)
    stamp = now()
    doc["createdAt"] = stamp
    doc["updatedAt"] = stamp
    result = db[collection_name].insert_one(doc)
    return result.inserted_id


def serialize_doc(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not doc:
        return doc
    doc = dict(doc)
    _id = doc.pop("_id", None)
    if _id is not None:
        doc = {"id": str(_id), **doc}
    # Convert ObjectId in nested fields and id lists
    for k, v in list(doc.items()):
        if isinstance(v, ObjectId):
            doc[k] = str(v)
        elif isinstance(v, list):
            doc[k] = [str(i) if isinstance(i, ObjectId) else i for i in v]
    return doc
