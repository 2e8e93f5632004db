"""
MongoDB access helpers
"""
import logging
from typing import Any, Dict, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database

from config import Settings
from errors import BadRequest

logger = logging.getLogger(__name__)

USERS = "users"
PRODUCTS = "products"
REVIEWS = "reviews"
ORDERS = "orders"


def connect(settings: Settings) -> MongoClient:
    """Open a client and make sure the server answers; raises if it does not."""
    client = MongoClient(settings.mongodb_uri, serverSelectionTimeoutMS=5000)
    client.admin.command("ping")
    logger.info("Connected to MongoDB database %s", settings.database_name)
    return client


def ensure_indexes(db: Database) -> None:
    db[USERS].create_index([("email", ASCENDING)], unique=True)
    db[PRODUCTS].create_index([("category", ASCENDING)])
    db[REVIEWS].create_index([("productId", ASCENDING)])
    db[ORDERS].create_index([("userId", ASCENDING)])
    logger.info("Indexes ensured on %s", db.name)


def to_object_id(value: str) -> ObjectId:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise BadRequest("Invalid id", f"{value!r} is not a valid object id")


def serialize(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if doc is None:
        return None
    d = {**doc}
    if "_id" in d:
        d["_id"] = str(d["_id"])
    return d


def insert_result(result) -> Dict[str, Any]:
    return {"acknowledged": result.acknowledged, "insertedId": str(result.inserted_id)}


def update_result(result) -> Dict[str, Any]:
    return {
        "acknowledged": result.acknowledged,
        "matchedCount": result.matched_count,
        "modifiedCount": result.modified_count,
    }


def paginate(cursor, skip: int = 0, limit: Optional[int] = None):
    if skip:
        cursor = cursor.skip(skip)
    if limit:
        cursor = cursor.limit(limit)
    return cursor
