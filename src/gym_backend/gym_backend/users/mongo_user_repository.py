from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from ..core.enums import CodePurpose, Role
from ..database.mongo_base import MongoRepository, to_object_id
from .model import User, VerificationCode
from .repository import UserRepository


def _to_user(doc: dict) -> User:
    return User(
        user_id=str(doc["_id"]),
        full_name=doc["full_name"],
        email=doc["email"],
        password_hash=doc["password_hash"],
        role=Role(doc.get("role", Role.RECEPTION.value)),
        is_email_verified=bool(doc.get("is_email_verified", False)),
        codes=tuple(
            VerificationCode(code=c["code"], purpose=CodePurpose(c["purpose"]), expires_at=c["expires_at"])
            for c in doc.get("codes") or ()
        ),
    )


def _code_doc(entry: VerificationCode) -> dict:
    return {"code": entry.code, "purpose": entry.purpose.value, "expires_at": entry.expires_at}


class MongoUserRepository(MongoRepository, UserRepository):
    collection_name = "users"

    def get_by_id(self, user_id: str) -> Optional[User]:
        oid = to_object_id(user_id)
        if oid is None:
            return None
        doc = self.collection.find_one({"_id": oid})
        return _to_user(doc) if doc else None

    def get_by_email(self, email: str) -> Optional[User]:
        doc = self.collection.find_one({"email": email})
        return _to_user(doc) if doc else None

    def create(self, fields: dict[str, Any]) -> str:
        doc = dict(fields)
        doc.setdefault("is_email_verified", False)
        doc["codes"] = [_code_doc(c) for c in doc.get("codes") or ()]
        doc["created_at"] = doc["updated_at"] = datetime.now()
        return self._insert(doc, duplicate_message="Email already exists")

    def _update(self, user_id: str, update: dict) -> None:
        oid = to_object_id(user_id)
        if oid is None:
            return
        update.setdefault("$set", {})["updated_at"] = datetime.now()
        self.collection.update_one({"_id": oid}, update)

    def add_code(self, user_id: str, entry: VerificationCode) -> None:
        self._update(user_id, {"$push": {"codes": _code_doc(entry)}})

    def remove_code(self, user_id: str, entry: VerificationCode) -> None:
        self._update(user_id, {"$pull": {"codes": {"code": entry.code, "purpose": entry.purpose.value}}})

    def remove_codes(self, user_id: str, purpose: CodePurpose) -> None:
        self._update(user_id, {"$pull": {"codes": {"purpose": purpose.value}}})

    def mark_email_verified(self, user_id: str) -> None:
        self._update(user_id, {"$set": {"is_email_verified": True}})

    def update_password(self, user_id: str, password_hash: str) -> None:
        self._update(user_id, {"$set": {"password_hash": password_hash}})
