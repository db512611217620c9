"""Per-entity access to the MongoDB collections.

Repositories return raw documents (with ObjectIds); routes serialize them
with `database.serialize_doc` before responding.
"""

import math
import re
import secrets
import string
from typing import Any, Dict, List, Optional

from bson import ObjectId
from fastapi import Depends
from pydantic import BaseModel
from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from .database import PRODUCTS, STOCKS, USERS, create_document, get_db, now
from .errors import AlreadyExists, NotFound
from .schemas import Stock

BATCH_ID_ALPHABET = string.ascii_uppercase + string.digits
BATCH_ID_LENGTH = 6


def to_object_id(value: Any) -> ObjectId:
    """Parse an id from a path or payload; bson's InvalidId propagates."""
    if isinstance(value, ObjectId):
        return value
    return ObjectId(value)


def contains(text: Optional[str]) -> Optional[Dict[str, str]]:
    """Case-insensitive substring match, or None when there is nothing to match."""
    if text is None or not text.strip():
        return None
    return {"$regex": re.escape(text.strip()), "$options": "i"}


def generate_batch_id() -> str:
    return "".join(secrets.choice(BATCH_ID_ALPHABET) for _ in range(BATCH_ID_LENGTH))


class Repository:
    collection_name: str
    entity: str
    duplicate_message: Optional[str] = None

    def __init__(self, db: Database):
        self.db = db
        self.collection = db[self.collection_name]

    def find(self, query: Dict[str, Any], skip: int = 0, limit: int = 0) -> List[Dict[str, Any]]:
        cursor = self.collection.find(query).sort("_id", 1).skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return list(cursor)

    def count(self, query: Dict[str, Any]) -> int:
        return self.collection.count_documents(query)

    def find_by_id(self, id: Any) -> Optional[Dict[str, Any]]:
        return self.collection.find_one({"_id": to_object_id(id)})

    def get(self, id: Any) -> Dict[str, Any]:
        doc = self.find_by_id(id)
        if not doc:
            raise NotFound(f"{self.entity} not found")
        return doc

    def create(self, data: BaseModel) -> Dict[str, Any]:
        try:
            inserted_id = create_document(self.db, self.collection_name, data)
        except DuplicateKeyError:
            if self.duplicate_message:
                raise AlreadyExists(self.duplicate_message)
            raise
        return self.collection.find_one({"_id": inserted_id})

    def update(self, id: Any, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Set the given fields and return the updated document, or None if missing."""
        changes = dict(fields, updatedAt=now())
        try:
            return self.collection.find_one_and_update(
                {"_id": to_object_id(id)},
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            if self.duplicate_message:
                raise AlreadyExists(self.duplicate_message)
            raise

    def delete(self, id: Any) -> int:
        return self.collection.delete_one({"_id": to_object_id(id)}).deleted_count

    def paginate(self, query: Dict[str, Any], page: int, per_page: int) -> Dict[str, Any]:
        total = self.count(query)
        docs = self.find(query, skip=(page - 1) * per_page, limit=per_page)
        return {
            "currentPage": page,
            "perPage": per_page,
            "totalPages": math.ceil(total / per_page),
            "totalResults": total,
            "data": docs,
        }


class UserRepository(Repository):
    collection_name = USERS
    entity = "User"
    duplicate_message = "Email already exists!"

    def find_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return self.collection.find_one({"email": email})


class ProductRepository(Repository):
    collection_name = PRODUCTS
    entity = "Product"
    duplicate_message = "Product already exists!"

    def attach_stock(self, product_id: Any, stock_id: ObjectId) -> Optional[Dict[str, Any]]:
        return self.collection.find_one_and_update(
            {"_id": to_object_id(product_id)},
            {"$push": {"stocks": stock_id}, "$set": {"updatedAt": now()}},
            return_document=ReturnDocument.AFTER,
        )

    def detach_stock(self, product_id: Any, stock_id: ObjectId) -> Optional[Dict[str, Any]]:
        return self.collection.find_one_and_update(
            {"_id": to_object_id(product_id)},
            {"$pull": {"stocks": stock_id}, "$set": {"updatedAt": now()}},
            return_document=ReturnDocument.AFTER,
        )


class StockRepository(Repository):
    collection_name = STOCKS
    entity = "Stock"

    def create_batch(self, quantity: int) -> Dict[str, Any]:
        return self.create(Stock(batch_id=generate_batch_id(), quantity=quantity))


def get_user_repository(db: Database = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_product_repository(db: Database = Depends(get_db)) -> ProductRepository:
    return ProductRepository(db)


def get_stock_repository(db: Database = Depends(get_db)) -> StockRepository:
    return StockRepository(db)
