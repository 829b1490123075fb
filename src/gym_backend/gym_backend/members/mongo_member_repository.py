from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Sequence

from pymongo import DESCENDING, ReturnDocument

from ..core.enums import Gender, MemberStatus
from ..database.mongo_base import MongoRepository, regex_contains, to_bson_datetime, to_object_id, to_object_ids
from .model import EmergencyContact, Member
from .repository import MemberRepository


def _to_member(doc: dict) -> Member:
    return Member(
        member_id=str(doc["_id"]),
        full_name=doc["full_name"],
        email=doc["email"],
        phone=doc["phone"],
        gender=Gender(doc["gender"]),
        membership_number=doc["membership_number"],
        join_date=doc["join_date"],
        status=MemberStatus(doc.get("status", MemberStatus.ACTIVE.value)),
        date_of_birth=doc.get("date_of_birth"),
        address=doc.get("address"),
        emergency_contact=EmergencyContact.from_dict(doc.get("emergency_contact")),
        notes=doc.get("notes"),
        last_visit=doc.get("last_visit"),
        total_visits=int(doc.get("total_visits", 0)),
    )


class MongoMemberRepository(MongoRepository, MemberRepository):
    collection_name = "members"

    def get_by_id(self, member_id: str) -> Optional[Member]:
        oid = to_object_id(member_id)
        if oid is None:
            return None
        doc = self.collection.find_one({"_id": oid})
        return _to_member(doc) if doc else None

    def get_by_email(self, email: str) -> Optional[Member]:
        doc = self.collection.find_one({"email": email})
        return _to_member(doc) if doc else None

    def get_by_membership_number(self, membership_number: str) -> Optional[Member]:
        doc = self.collection.find_one({"membership_number": membership_number})
        return _to_member(doc) if doc else None

    def get_many(self, member_ids: Sequence[str]) -> dict[str, Member]:
        docs = self.collection.find({"_id": {"$in": to_object_ids(member_ids)}})
        return {str(d["_id"]): _to_member(d) for d in docs}

    def count(self) -> int:
        return self.collection.count_documents({})

    def create(self, fields: dict[str, Any]) -> str:
        doc = dict(fields)
        doc["date_of_birth"] = to_bson_datetime(doc.get("date_of_birth"))
        doc.setdefault("total_visits", 0)
        doc["created_at"] = doc["updated_at"] = datetime.now()
        return self._insert(doc, duplicate_message="Email is already in use")

    def update(self, member_id: str, fields: dict[str, Any]) -> Optional[Member]:
        oid = to_object_id(member_id)
        if oid is None:
            return None
        changes = dict(fields)
        if "date_of_birth" in changes:
            changes["date_of_birth"] = to_bson_datetime(changes["date_of_birth"])
        changes["updated_at"] = datetime.now()
        doc = self.collection.find_one_and_update(
            {"_id": oid}, {"$set": changes}, return_document=ReturnDocument.AFTER
        )
        return _to_member(doc) if doc else None

    def delete(self, member_id: str) -> bool:
        oid = to_object_id(member_id)
        if oid is None:
            return False
        return self.collection.delete_one({"_id": oid}).deleted_count > 0

    def search(
        self,
        *,
        status: Optional[str] = None,
        gender: Optional[str] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[Sequence[Member], int]:
        query: dict[str, Any] = {}
        if status:
            query["status"] = status
        if gender:
            query["gender"] = gender
        if search:
            term = regex_contains(search)
            query["$or"] = [
                {"full_name": term},
                {"email": term},
                {"phone": term},
                {"membership_number": term},
            ]

        cursor = self.collection.find(query).sort("join_date", DESCENDING).skip(int(skip)).limit(int(limit))
        return [_to_member(d) for d in cursor], self.collection.count_documents(query)

    def record_visit(self, member_id: str, *, at: datetime) -> None:
        oid = to_object_id(member_id)
        if oid is None:
            return
        self.collection.update_one({"_id": oid}, {"$set": {"last_visit": at}, "$inc": {"total_visits": 1}})
