from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Sequence

from pymongo import DESCENDING, ReturnDocument

from ..core.enums import AttendanceStatus, CheckInMethod
from ..database.mongo_base import MongoRepository, to_object_id
from .model import AttendanceRecord
from .repository import AttendanceRepository


def _to_record(doc: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=str(doc["_id"]),
        member_id=str(doc["member_id"]),
        registration_id=str(doc["registration_id"]),
        checkin_time=doc["checkin_time"],
        checkout_time=doc.get("checkout_time"),
        workout_duration=doc.get("workout_duration"),
        status=AttendanceStatus(doc.get("status", AttendanceStatus.CHECKED_IN.value)),
        note=doc.get("note"),
        check_in_method=CheckInMethod(doc.get("check_in_method", CheckInMethod.MANUAL.value)),
    )


def _time_range(start: Optional[datetime], end: Optional[datetime]) -> Optional[dict]:
    rng: dict[str, Any] = {}
    if start is not None:
        rng["$gte"] = start
    if end is not None:
        rng["$lte"] = end
    return rng or None


class MongoAttendanceRepository(MongoRepository, AttendanceRepository):
    collection_name = "attendance"

    def get_by_id(self, attendance_id: str) -> Optional[AttendanceRecord]:
        oid = to_object_id(attendance_id)
        if oid is None:
            return None
        doc = self.collection.find_one({"_id": oid})
        return _to_record(doc) if doc else None

    def create(self, fields: dict[str, Any]) -> str:
        doc = dict(fields)
        doc["member_id"] = to_object_id(doc["member_id"])
        doc["registration_id"] = to_object_id(doc["registration_id"])
        doc.setdefault("checkout_time", None)
        doc["created_at"] = doc["updated_at"] = datetime.now()
        return self._insert(doc, duplicate_message="Attendance record already exists")

    def find_open_since(self, member_id: str, *, since: datetime) -> Optional[AttendanceRecord]:
        oid = to_object_id(member_id)
        if oid is None:
            return None
        doc = self.collection.find_one(
            {"member_id": oid, "checkin_time": {"$gte": since}, "checkout_time": None},
            sort=[("checkin_time", DESCENDING)],
        )
        return _to_record(doc) if doc else None

    def find_active_checkin(self, member_id: str, *, since: datetime) -> Optional[AttendanceRecord]:
        oid = to_object_id(member_id)
        if oid is None:
            return None
        doc = self.collection.find_one(
            {
                "member_id": oid,
                "checkin_time": {"$gte": since},
                "checkout_time": None,
                "status": AttendanceStatus.CHECKED_IN.value,
            },
            sort=[("checkin_time", DESCENDING)],
        )
        return _to_record(doc) if doc else None

    def complete_checkout(
        self,
        attendance_id: str,
        *,
        checkout_time: datetime,
        workout_duration: int,
        note: Optional[str],
    ) -> Optional[AttendanceRecord]:
        oid = to_object_id(attendance_id)
        if oid is None:
            return None
        doc = self.collection.find_one_and_update(
            {"_id": oid, "status": AttendanceStatus.CHECKED_IN.value},
            {
                "$set": {
                    "checkout_time": checkout_time,
                    "workout_duration": int(workout_duration),
                    "status": AttendanceStatus.COMPLETED.value,
                    "note": note,
                    "updated_at": checkout_time,
                }
            },
            return_document=ReturnDocument.AFTER,
        )
        return _to_record(doc) if doc else None

    def _query(
        self,
        *,
        member_id: Optional[str] = None,
        status: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> dict:
        query: dict[str, Any] = {}
        if member_id:
            query["member_id"] = to_object_id(member_id)
        if status:
            query["status"] = status
        rng = _time_range(start, end)
        if rng:
            query["checkin_time"] = rng
        return query

    def list_between(
        self, *, start: datetime, end: datetime, member_id: Optional[str] = None
    ) -> Sequence[AttendanceRecord]:
        query = self._query(member_id=member_id, start=start, end=end)
        return [_to_record(d) for d in self.collection.find(query).sort("checkin_time", DESCENDING)]

    def search(
        self,
        *,
        member_id: Optional[str] = None,
        status: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[Sequence[AttendanceRecord], int]:
        query = self._query(member_id=member_id, status=status, start=start, end=end)
        cursor = self.collection.find(query).sort("checkin_time", DESCENDING).skip(int(skip)).limit(int(limit))
        return [_to_record(d) for d in cursor], self.collection.count_documents(query)

    def count(
        self,
        *,
        member_id: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> int:
        return self.collection.count_documents(self._query(member_id=member_id, start=start, end=end))

    def total_workout_minutes(self, member_id: str) -> int:
        oid = to_object_id(member_id)
        if oid is None:
            return 0
        rows = list(
            self.collection.aggregate(
                [
                    {"$match": {"member_id": oid, "workout_duration": {"$ne": None}}},
                    {"$group": {"_id": None, "total": {"$sum": "$workout_duration"}}},
                ]
            )
        )
        return int(rows[0]["total"]) if rows else 0

    def daily_checkins(self, *, start: datetime, end: datetime) -> Sequence[dict]:
        rows = self.collection.aggregate(
            [
                {"$match": {"checkin_time": {"$gte": start, "$lte": end}}},
                {
                    "$group": {
                        "_id": {"$dateToString": {"format": "%Y-%m-%d", "date": "$checkin_time"}},
                        "count": {"$sum": 1},
                    }
                },
                {"$sort": {"_id": 1}},
            ]
        )
        return [{"date": r["_id"], "count": r["count"]} for r in rows]

    def most_active_members(self, *, start: datetime, end: datetime, limit: int) -> Sequence[dict]:
        rows = self.collection.aggregate(
            [
                {"$match": {"checkin_time": {"$gte": start, "$lte": end}}},
                {
                    "$group": {
                        "_id": "$member_id",
                        "visit_count": {"$sum": 1},
                        "last_visit": {"$max": "$checkin_time"},
                    }
                },
                {"$sort": {"visit_count": -1}},
                {"$limit": int(limit)},
            ]
        )
        return [
            {"member_id": str(r["_id"]), "visit_count": r["visit_count"], "last_visit": r["last_visit"]}
            for r in rows
        ]
