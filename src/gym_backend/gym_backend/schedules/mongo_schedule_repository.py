from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Sequence

from pymongo import ASCENDING, DESCENDING, ReturnDocument

from ..core.enums import ScheduleStatus, ShiftType
from ..database.mongo_base import MongoRepository, to_bson_datetime, to_object_id
from .model import WorkSchedule
from .repository import ScheduleRepository


def _to_schedule(doc: dict) -> WorkSchedule:
    return WorkSchedule(
        schedule_id=str(doc["_id"]),
        employee_id=str(doc["employee_id"]),
        work_date=doc["work_date"],
        start_time=doc["start_time"],
        end_time=doc["end_time"],
        shift_type=ShiftType(doc.get("shift_type", ShiftType.MORNING.value)),
        status=ScheduleStatus(doc.get("status", ScheduleStatus.SCHEDULED.value)),
        notes=doc.get("notes"),
    )


def _to_doc(fields: dict[str, Any]) -> dict[str, Any]:
    doc = dict(fields)
    if "employee_id" in doc:
        doc["employee_id"] = to_object_id(doc["employee_id"])
    if "work_date" in doc:
        doc["work_date"] = to_bson_datetime(doc["work_date"])
    return doc


class MongoScheduleRepository(MongoRepository, ScheduleRepository):
    collection_name = "work_schedules"

    def get_by_id(self, schedule_id: str) -> Optional[WorkSchedule]:
        oid = to_object_id(schedule_id)
        if oid is None:
            return None
        doc = self.collection.find_one({"_id": oid})
        return _to_schedule(doc) if doc else None

    def create(self, fields: dict[str, Any]) -> str:
        doc = _to_doc(fields)
        doc["created_at"] = doc["updated_at"] = datetime.now()
        return self._insert(doc, duplicate_message="Work schedule already exists")

    def update(self, schedule_id: str, fields: dict[str, Any]) -> Optional[WorkSchedule]:
        oid = to_object_id(schedule_id)
        if oid is None:
            return None
        changes = _to_doc(fields)
        changes["updated_at"] = datetime.now()
        doc = self.collection.find_one_and_update(
            {"_id": oid}, {"$set": changes}, return_document=ReturnDocument.AFTER
        )
        return _to_schedule(doc) if doc else None

    def delete(self, schedule_id: str) -> bool:
        oid = to_object_id(schedule_id)
        if oid is None:
            return False
        return self.collection.delete_one({"_id": oid}).deleted_count > 0

    def search(
        self,
        *,
        employee_id: Optional[str] = None,
        day_start: Optional[datetime] = None,
        day_end: Optional[datetime] = None,
        status: Optional[str] = None,
        shift_type: Optional[str] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[Sequence[WorkSchedule], int]:
        query: dict[str, Any] = {}
        if employee_id:
            query["employee_id"] = to_object_id(employee_id)
        if status:
            query["status"] = status
        if shift_type:
            query["shift_type"] = shift_type
        if day_start is not None and day_end is not None:
            query["work_date"] = {"$gte": day_start, "$lt": day_end}

        cursor = (
            self.collection.find(query)
            .sort([("work_date", DESCENDING), ("start_time", ASCENDING)])
            .skip(int(skip))
            .limit(int(limit))
        )
        return [_to_schedule(d) for d in cursor], self.collection.count_documents(query)
