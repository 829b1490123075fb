from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Sequence

from pymongo import DESCENDING, ReturnDocument

from ..core.enums import DiscountStatus, DiscountType
from ..database.mongo_base import MongoRepository, to_object_id, to_object_ids
from .model import Discount
from .repository import DiscountRepository


def _to_discount(doc: dict) -> Discount:
    return Discount(
        discount_id=str(doc["_id"]),
        code=doc["code"],
        discount_type=DiscountType(doc["type"]),
        value=doc["value"],
        start_date=doc["start_date"],
        end_date=doc["end_date"],
        name=doc.get("name"),
        description=doc.get("description"),
        max_discount_amount=doc.get("max_discount_amount"),
        applicable_packages=tuple(str(p) for p in (doc.get("applicable_packages") or ())),
        usage_limit=doc.get("usage_limit"),
        used_count=int(doc.get("used_count", 0)),
        status=DiscountStatus(doc.get("status", DiscountStatus.ACTIVE.value)),
    )


def _to_doc(fields: dict[str, Any]) -> dict[str, Any]:
    doc = dict(fields)
    if "discount_type" in doc:
        doc["type"] = doc.pop("discount_type")
    if "applicable_packages" in doc:
        doc["applicable_packages"] = to_object_ids(doc["applicable_packages"] or [])
    return doc


class MongoDiscountRepository(MongoRepository, DiscountRepository):
    collection_name = "discounts"

    def get_by_id(self, discount_id: str) -> Optional[Discount]:
        oid = to_object_id(discount_id)
        if oid is None:
            return None
        doc = self.collection.find_one({"_id": oid})
        return _to_discount(doc) if doc else None

    def get_by_code(self, code: str) -> Optional[Discount]:
        doc = self.collection.find_one({"code": code})
        return _to_discount(doc) if doc else None

    def find_active_by_code(self, code: str, *, now: datetime) -> Optional[Discount]:
        doc = self.collection.find_one(
            {
                "code": code,
                "status": DiscountStatus.ACTIVE.value,
                "start_date": {"$lte": now},
                "end_date": {"$gte": now},
            }
        )
        return _to_discount(doc) if doc else None

    def list_active(self, *, now: datetime) -> Sequence[Discount]:
        cursor = self.collection.find(
            {
                "status": DiscountStatus.ACTIVE.value,
                "start_date": {"$lte": now},
                "end_date": {"$gte": now},
            }
        ).sort("end_date", 1)
        return [_to_discount(d) for d in cursor]

    def create(self, fields: dict[str, Any]) -> str:
        doc = _to_doc(fields)
        doc.setdefault("used_count", 0)
        doc["created_at"] = doc["updated_at"] = datetime.now()
        return self._insert(doc, duplicate_message="Discount code already exists")

    def update(self, discount_id: str, fields: dict[str, Any]) -> Optional[Discount]:
        oid = to_object_id(discount_id)
        if oid is None:
            return None
        changes = _to_doc(fields)
        changes["updated_at"] = datetime.now()
        doc = self.collection.find_one_and_update(
            {"_id": oid}, {"$set": changes}, return_document=ReturnDocument.AFTER
        )
        return _to_discount(doc) if doc else None

    def delete(self, discount_id: str) -> bool:
        oid = to_object_id(discount_id)
        if oid is None:
            return False
        return self.collection.delete_one({"_id": oid}).deleted_count > 0

    def search(
        self,
        *,
        status: Optional[str] = None,
        discount_type: Optional[str] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[Sequence[Discount], int]:
        query: dict[str, Any] = {}
        if status:
            query["status"] = status
        if discount_type:
            query["type"] = discount_type
        cursor = self.collection.find(query).sort("created_at", DESCENDING).skip(int(skip)).limit(int(limit))
        return [_to_discount(d) for d in cursor], self.collection.count_documents(query)

    def increment_usage(self, discount_id: str) -> bool:
        oid = to_object_id(discount_id)
        if oid is None:
            return False
        return self.collection.update_one({"_id": oid}, {"$inc": {"used_count": 1}}).matched_count > 0

    def expire_past_due(self, *, now: datetime) -> int:
        result = self.collection.update_many(
            {"status": {"$ne": DiscountStatus.EXPIRED.value}, "end_date": {"$lt": now}},
            {"$set": {"status": DiscountStatus.EXPIRED.value, "updated_at": now}},
        )
        return result.modified_count

    def usage_by_status(self) -> Sequence[dict]:
        rows = self.collection.aggregate(
            [{"$group": {"_id": "$status", "count": {"$sum": 1}, "total_usage": {"$sum": "$used_count"}}}]
        )
        return [{"status": r["_id"], "count": r["count"], "total_usage": r["total_usage"]} for r in rows]

    def count_active(self, *, now: datetime) -> int:
        return self.collection.count_documents(
            {
                "status": DiscountStatus.ACTIVE.value,
                "start_date": {"$lte": now},
                "end_date": {"$gte": now},
            }
        )

    def count_expiring(self, *, now: datetime, until: datetime) -> int:
        return self.collection.count_documents(
            {"status": DiscountStatus.ACTIVE.value, "end_date": {"$gte": now, "$lte": until}}
        )
