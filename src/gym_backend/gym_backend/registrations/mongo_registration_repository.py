from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Sequence

from pymongo import DESCENDING, ReturnDocument

from ..core.enums import PaymentMethod, RegistrationStatus
from ..database.mongo_base import MongoRepository, id_str, to_object_id
from .model import PackageRegistration
from .repository import RegistrationRepository

_REFERENCE_FIELDS = ("member_id", "package_id", "discount_id")


def _to_registration(doc: dict) -> PackageRegistration:
    return PackageRegistration(
        registration_id=str(doc["_id"]),
        member_id=str(doc["member_id"]),
        package_id=str(doc["package_id"]),
        start_date=doc["start_date"],
        end_date=doc["end_date"],
        original_price=doc["original_price"],
        final_price=doc["final_price"],
        discount_amount=doc.get("discount_amount", 0),
        discount_id=id_str(doc.get("discount_id")),
        remaining_sessions=doc.get("remaining_sessions"),
        payment_method=PaymentMethod(doc.get("payment_method", PaymentMethod.CASH.value)),
        status=RegistrationStatus(doc.get("status", RegistrationStatus.ACTIVE.value)),
        status_reason=doc.get("status_reason"),
        registration_date=doc.get("registration_date"),
        updated_at=doc.get("updated_at"),
    )


class MongoRegistrationRepository(MongoRepository, RegistrationRepository):
    collection_name = "package_registrations"

    def get_by_id(self, registration_id: str) -> Optional[PackageRegistration]:
        oid = to_object_id(registration_id)
        if oid is None:
            return None
        doc = self.collection.find_one({"_id": oid})
        return _to_registration(doc) if doc else None

    def create(self, fields: dict[str, Any]) -> str:
        doc = dict(fields)
        for key in _REFERENCE_FIELDS:
            doc[key] = to_object_id(doc.get(key))
        now = datetime.now()
        doc.setdefault("registration_date", now)
        doc["created_at"] = doc["updated_at"] = now
        return self._insert(doc, duplicate_message="Registration already exists")

    def find_unexpired_for_member(self, member_id: str, *, now: datetime) -> Optional[PackageRegistration]:
        oid = to_object_id(member_id)
        if oid is None:
            return None
        doc = self.collection.find_one({"member_id": oid, "end_date": {"$gt": now}})
        return _to_registration(doc) if doc else None

    def _active_query(self, member_id: str, now: datetime, started_only: bool) -> Optional[dict]:
        oid = to_object_id(member_id)
        if oid is None:
            return None
        query: dict[str, Any] = {
            "member_id": oid,
            "status": RegistrationStatus.ACTIVE.value,
            "end_date": {"$gte": now},
        }
        if started_only:
            query["start_date"] = {"$lte": now}
        return query

    def list_active_for_member(
        self, member_id: str, *, now: datetime, started_only: bool = False
    ) -> Sequence[PackageRegistration]:
        query = self._active_query(member_id, now, started_only)
        if query is None:
            return []
        cursor = self.collection.find(query).sort("created_at", DESCENDING)
        return [_to_registration(d) for d in cursor]

    def count_active_for_member(self, member_id: str, *, now: datetime) -> int:
        query = self._active_query(member_id, now, False)
        return self.collection.count_documents(query) if query else 0

    def search(
        self,
        *,
        member_id: Optional[str] = None,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 10,
    ) -> tuple[Sequence[PackageRegistration], int]:
        query: dict[str, Any] = {}
        if member_id:
            query["member_id"] = to_object_id(member_id)
        if status:
            query["status"] = status
        cursor = self.collection.find(query).sort("created_at", DESCENDING).skip(int(skip)).limit(int(limit))
        return [_to_registration(d) for d in cursor], self.collection.count_documents(query)

    def update_status(
        self, registration_id: str, status: str, reason: Optional[str], *, at: datetime
    ) -> Optional[PackageRegistration]:
        oid = to_object_id(registration_id)
        if oid is None:
            return None
        doc = self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": {"status": status, "status_reason": reason, "updated_at": at}},
            return_document=ReturnDocument.AFTER,
        )
        return _to_registration(doc) if doc else None

    def consume_session(self, registration_id: str) -> bool:
        oid = to_object_id(registration_id)
        if oid is None:
            return False
        result = self.collection.update_one(
            {"_id": oid, "remaining_sessions": {"$gt": 0}},
            {"$inc": {"remaining_sessions": -1}},
        )
        return result.modified_count > 0
