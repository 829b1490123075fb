from __future__ import annotations

from datetime import datetime

from pymongo import ASCENDING, DESCENDING, IndexModel
from pymongo.database import Database
from werkzeug.security import generate_password_hash

from ..core.enums import PackageStatus, Role

INDEXES: dict[str, list[IndexModel]] = {
    "members": [
        IndexModel([("email", ASCENDING)], unique=True),
        IndexModel([("membership_number", ASCENDING)], unique=True),
        IndexModel([("join_date", DESCENDING)]),
    ],
    "users": [IndexModel([("email", ASCENDING)], unique=True)],
    "packages": [IndexModel([("code", ASCENDING)], unique=True)],
    "discounts": [
        IndexModel([("code", ASCENDING)], unique=True),
        IndexModel([("status", ASCENDING), ("end_date", ASCENDING)]),
    ],
    "employees": [
        IndexModel([("email", ASCENDING)], unique=True),
        IndexModel([("position", ASCENDING)]),
        IndexModel([("status", ASCENDING)]),
    ],
    "package_registrations": [
        IndexModel([("member_id", ASCENDING), ("end_date", DESCENDING)]),
        IndexModel([("status", ASCENDING)]),
    ],
    "attendance": [
        IndexModel([("member_id", ASCENDING), ("checkin_time", DESCENDING)]),
        IndexModel([("checkin_time", ASCENDING)]),
        IndexModel([("status", ASCENDING)]),
    ],
    "work_schedules": [
        IndexModel([("employee_id", ASCENDING), ("work_date", ASCENDING)]),
        IndexModel([("work_date", ASCENDING)]),
        IndexModel([("status", ASCENDING)]),
    ],
}

DEMO_PACKAGES = [
    {
        "code": "BASIC30",
        "name": "Basic 30 days",
        "description": "Gym floor access for one month",
        "price": 500000,
        "duration_days": 30,
        "max_sessions": None,
        "features": ["Gym floor", "Locker"],
    },
    {
        "code": "PT10",
        "name": "Personal training 10 sessions",
        "description": "Ten coached sessions within 60 days",
        "price": 2500000,
        "duration_days": 60,
        "max_sessions": 10,
        "features": ["Personal trainer", "Gym floor", "Locker"],
    },
    {
        "code": "PREMIUM90",
        "name": "Premium 90 days",
        "description": "All areas including group classes",
        "price": 1350000,
        "duration_days": 90,
        "max_sessions": None,
        "features": ["Gym floor", "Group classes", "Sauna", "Locker"],
    },
]


def ensure_indexes(db: Database) -> list[str]:
    """Create every index (idempotent). Returns the collection names touched."""
    for name, models in INDEXES.items():
        db[name].create_indexes(models)
    return sorted(INDEXES)


def ensure_admin_user(db: Database, *, email: str, password: str, full_name: str = "Administrator") -> bool:
    """Insert a verified admin account unless the email is taken. Returns True when created."""
    email = email.strip().lower()
    if db["users"].find_one({"email": email}):
        return False
    now = datetime.now()
    db["users"].insert_one(
        {
            "full_name": full_name,
            "email": email,
            "password_hash": generate_password_hash(password),
            "role": Role.ADMIN.value,
            "is_email_verified": True,
            "codes": [],
            "created_at": now,
            "updated_at": now,
        }
    )
    return True


def ensure_demo_packages(db: Database) -> int:
    """Upsert demo packages by code. Returns how many were inserted."""
    inserted = 0
    now = datetime.now()
    for pkg in DEMO_PACKAGES:
        result = db["packages"].update_one(
            {"code": pkg["code"]},
            {
                "$setOnInsert": dict(
                    pkg,
                    status=PackageStatus.ACTIVE.value,
                    created_at=now,
                    updated_at=now,
                )
            },
            upsert=True,
        )
        if result.upserted_id is not None:
            inserted += 1
    return inserted


def list_collections(db: Database) -> list[str]:
    return sorted(db.list_collection_names())
