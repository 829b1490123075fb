from __future__ import annotations

import re
from datetime import date, datetime, time
from typing import Any, Iterable, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from ..core.exceptions import ConflictError
from .connection import DatabaseConnection


class MongoRepository:
    """Shared plumbing for collection-backed repositories."""

    collection_name: str = ""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @property
    def collection(self) -> Collection:
        return self._conn_factory.database()[self.collection_name]

    def _insert(self, doc: dict, *, duplicate_message: str) -> str:
        try:
            result = self.collection.insert_one(doc)
        except DuplicateKeyError:
            raise ConflictError(duplicate_message)
        return str(result.inserted_id)


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Parse an id coming from a URL/body; invalid ids behave like missing records."""
    if value is None:
        return None
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


def to_object_ids(values: Iterable[Any]) -> list[ObjectId]:
    out = []
    for v in values:
        oid = to_object_id(v)
        if oid is not None:
            out.append(oid)
    return out


def id_str(value: Any) -> Optional[str]:
    return str(value) if value is not None else None


def to_bson_datetime(value: Any) -> Optional[datetime]:
    """BSON has no plain date type; store dates as midnight datetimes."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    return value


def regex_contains(term: str) -> dict:
    return {"$regex": re.escape(term), "$options": "i"}
