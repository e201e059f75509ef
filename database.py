"""
MongoDB access helpers.

The module keeps a single client/database handle built from DATABASE_URL.
Route code goes through get_db() so the handle can be swapped (tests use an
in-memory database).
"""
import logging
from datetime import datetime, timezone
from typing import Any, Optional, Union

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel
from pymongo import ASCENDING, DESCENDING, MongoClient

import config

logger = logging.getLogger(__name__)

client = None
db = None

if config.DATABASE_URL:
    client = MongoClient(config.DATABASE_URL)
    db = client[config.DATABASE_NAME]


def get_db():
    if db is None:
        raise RuntimeError("Database is not configured (set DATABASE_URL)")
    return db


def utcnow() -> datetime:
    # MongoDB stores UTC and hands back naive datetimes, so store naive UTC too
    return datetime.now(timezone.utc).replace(tzinfo=None)


def create_document(collection_name: str, data: Union[BaseModel, dict]) -> str:
    """Insert a document stamped with created_at/updated_at, return its id."""
    if isinstance(data, BaseModel):
        data_dict = data.model_dump()
    else:
        data_dict = dict(data)

    now = utcnow()
    data_dict.setdefault("created_at", now)
    data_dict["updated_at"] = now

    result = get_db()[collection_name].insert_one(data_dict)
    return str(result.inserted_id)


def ensure_indexes() -> None:
    database = get_db()
    database["users"].create_index("email", unique=True)
    database["posts"].create_index("slug", unique=True)
    database["posts"].create_index([("author", ASCENDING), ("updated_at", DESCENDING)])
    database["posts"].create_index([("is_published", ASCENDING), ("published_at", DESCENDING)])
    database["likes"].create_index([("user", ASCENDING), ("post", ASCENDING)], unique=True)
    database["comments"].create_index([("post", ASCENDING), ("created_at", DESCENDING)])
    database["refresh_tokens"].create_index("token", unique=True)
    logger.info("Database indexes ensured")


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Parse an id from a path/query value; None when it is not a valid ObjectId."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


def serialize(doc: Any) -> Any:
    """Make a Mongo document JSON friendly: _id -> id, ObjectId -> str."""
    if isinstance(doc, list):
        return [serialize(item) for item in doc]
    if isinstance(doc, dict):
        out = {}
        for key, value in doc.items():
            if key == "_id":
                out["id"] = str(value)
            else:
                out[key] = serialize(value)
        return out
    if isinstance(doc, ObjectId):
        return str(doc)
    return doc
