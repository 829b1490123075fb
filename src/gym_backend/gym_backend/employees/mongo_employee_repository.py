from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Sequence

from pymongo import DESCENDING, ReturnDocument

from ..core.enums import EmployeeStatus
from ..database.mongo_base import MongoRepository, regex_contains, to_bson_datetime, to_object_id, to_object_ids
from ..members.model import EmergencyContact
from .model import Employee
from .repository import EmployeeRepository

_GROUPABLE = {"department", "position"}


def _to_employee(doc: dict) -> Employee:
    return Employee(
        employee_id=str(doc["_id"]),
        full_name=doc["full_name"],
        email=doc["email"],
        phone=doc["phone"],
        position=doc["position"],
        department=doc.get("department"),
        salary=doc.get("salary"),
        hire_date=doc.get("hire_date"),
        status=EmployeeStatus(doc.get("status", EmployeeStatus.ACTIVE.value)),
        qualifications=tuple(doc.get("qualifications") or ()),
        emergency_contact=EmergencyContact.from_dict(doc.get("emergency_contact")),
        notes=doc.get("notes"),
    )


class MongoEmployeeRepository(MongoRepository, EmployeeRepository):
    collection_name = "employees"

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        oid = to_object_id(employee_id)
        if oid is None:
            return None
        doc = self.collection.find_one({"_id": oid})
        return _to_employee(doc) if doc else None

    def get_by_email(self, email: str) -> Optional[Employee]:
        doc = self.collection.find_one({"email": email})
        return _to_employee(doc) if doc else None

    def get_many(self, employee_ids: Sequence[str]) -> dict[str, Employee]:
        docs = self.collection.find({"_id": {"$in": to_object_ids(employee_ids)}})
        return {str(d["_id"]): _to_employee(d) for d in docs}

    def create(self, fields: dict[str, Any]) -> str:
        doc = dict(fields)
        doc["hire_date"] = to_bson_datetime(doc.get("hire_date")) or datetime.now()
        doc["created_at"] = doc["updated_at"] = datetime.now()
        return self._insert(doc, duplicate_message="Employee email already exists")

    def update(self, employee_id: str, fields: dict[str, Any]) -> Optional[Employee]:
        oid = to_object_id(employee_id)
        if oid is None:
            return None
        changes = dict(fields)
        if "hire_date" in changes:
            changes["hire_date"] = to_bson_datetime(changes["hire_date"])
        changes["updated_at"] = datetime.now()
        doc = self.collection.find_one_and_update(
            {"_id": oid}, {"$set": changes}, return_document=ReturnDocument.AFTER
        )
        return _to_employee(doc) if doc else None

    def delete(self, employee_id: str) -> bool:
        oid = to_object_id(employee_id)
        if oid is None:
            return False
        return self.collection.delete_one({"_id": oid}).deleted_count > 0

    def search(
        self,
        *,
        position: Optional[str] = None,
        department: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[Sequence[Employee], int]:
        query: dict[str, Any] = {}
        if position:
            query["position"] = position
        if department:
            query["department"] = department
        if status:
            query["status"] = status
        if search:
            term = regex_contains(search)
            query["$or"] = [{"full_name": term}, {"email": term}, {"position": term}]

        cursor = self.collection.find(query).sort("created_at", DESCENDING).skip(int(skip)).limit(int(limit))
        return [_to_employee(d) for d in cursor], self.collection.count_documents(query)

    def find_active(self, *, term: Optional[str] = None, department: Optional[str] = None, position: Optional[str] = None) -> Sequence[Employee]:
        query: dict[str, Any] = {"status": EmployeeStatus.ACTIVE.value}
        if department:
            query["department"] = department
        if position:
            query["position"] = position
        if term:
            rx = regex_contains(term)
            query["$or"] = [
                {"full_name": rx},
                {"email": rx},
                {"position": rx},
                {"department": rx},
                {"phone": rx},
            ]
        return [_to_employee(d) for d in self.collection.find(query).sort("full_name", 1)]

    def count_by_status(self) -> dict[str, int]:
        rows = self.collection.aggregate([{"$group": {"_id": "$status", "count": {"$sum": 1}}}])
        return {r["_id"]: r["count"] for r in rows}

    def group_active_by(self, field_name: str) -> Sequence[dict]:
        if field_name not in _GROUPABLE:
            raise ValueError(f"cannot group employees by {field_name!r}")
        rows = self.collection.aggregate(
            [
                {"$match": {"status": EmployeeStatus.ACTIVE.value}},
                {"$group": {"_id": f"${field_name}", "count": {"$sum": 1}, "avg_salary": {"$avg": "$salary"}}},
                {"$sort": {"count": -1}},
            ]
        )
        return [{field_name: r["_id"], "count": r["count"], "avg_salary": r["avg_salary"]} for r in rows]
