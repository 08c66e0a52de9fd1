import logging
import math

from bson import ObjectId
from pymongo import MongoClient
from pymongo.database import Database

from catalogue.config import Settings

logger = logging.getLogger(__name__)

USERS = "users"
PRODUCTS = "products"


def connect(settings: Settings) -> Database:
    client = MongoClient(settings.mongodb_uri)
    db = client[settings.db_name]
    logger.info("✅ MongoDB Connected! (database: %s)", settings.db_name)
    return db


def is_valid_id(value: str) -> bool:
    return ObjectId.is_valid(value)


def to_public(doc: dict) -> dict:
    """Copy a stored document, exposing ``_id`` as a string ``id``."""
    doc = dict(doc)
    doc["id"] = str(doc.pop("_id"))
    return doc


def strip_ids(fields: dict) -> dict:
    # the store assigns identifiers; callers never set them
    return {k: v for k, v in fields.items() if k not in ("_id", "id")}


def is_finite_json(value) -> bool:
    """False when a parsed body carries NaN or +/-Infinity anywhere."""
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, dict):
        return all(is_finite_json(v) for v in value.values())
    if isinstance(value, list):
        return all(is_finite_json(v) for v in value)
    return True
