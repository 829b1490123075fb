from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Sequence

from pymongo import DESCENDING, ReturnDocument

from ..core.enums import PackageStatus
from ..database.mongo_base import MongoRepository, to_object_id
from .model import Package
from .repository import PackageRepository


def _to_package(doc: dict) -> Package:
    return Package(
        package_id=str(doc["_id"]),
        code=doc["code"],
        name=doc["name"],
        price=doc.get("price", 0),
        duration_days=int(doc["duration_days"]),
        max_sessions=doc.get("max_sessions"),
        description=doc.get("description"),
        features=tuple(doc.get("features") or ()),
        status=PackageStatus(doc.get("status", PackageStatus.ACTIVE.value)),
    )


class MongoPackageRepository(MongoRepository, PackageRepository):
    collection_name = "packages"

    def get_by_id(self, package_id: str) -> Optional[Package]:
        oid = to_object_id(package_id)
        if oid is None:
            return None
        doc = self.collection.find_one({"_id": oid})
        return _to_package(doc) if doc else None

    def get_by_code(self, code: str) -> Optional[Package]:
        doc = self.collection.find_one({"code": code})
        return _to_package(doc) if doc else None

    def create(self, fields: dict[str, Any]) -> str:
        doc = dict(fields)
        doc["created_at"] = doc["updated_at"] = datetime.now()
        return self._insert(doc, duplicate_message="Package code already exists")

    def update(self, package_id: str, fields: dict[str, Any]) -> Optional[Package]:
        oid = to_object_id(package_id)
        if oid is None:
            return None
        changes = dict(fields, updated_at=datetime.now())
        doc = self.collection.find_one_and_update(
            {"_id": oid}, {"$set": changes}, return_document=ReturnDocument.AFTER
        )
        return _to_package(doc) if doc else None

    def delete(self, package_id: str) -> bool:
        oid = to_object_id(package_id)
        if oid is None:
            return False
        return self.collection.delete_one({"_id": oid}).deleted_count > 0

    def search(
        self,
        *,
        status: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[Sequence[Package], int]:
        query: dict[str, Any] = {}
        if status:
            query["status"] = status
        if min_price is not None or max_price is not None:
            query["price"] = {}
            if min_price is not None:
                query["price"]["$gte"] = float(min_price)
            if max_price is not None:
                query["price"]["$lte"] = float(max_price)

        cursor = self.collection.find(query).sort("created_at", DESCENDING).skip(int(skip)).limit(int(limit))
        return [_to_package(d) for d in cursor], self.collection.count_documents(query)
