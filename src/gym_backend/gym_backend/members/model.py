from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Gender, MemberStatus


@dataclass(frozen=True)
class EmergencyContact:
    name: Optional[str] = None
    phone: Optional[str] = None
    relationship: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["EmergencyContact"]:
        if not data:
            return None
        return cls(name=data.get("name"), phone=data.get("phone"), relationship=data.get("relationship"))

    def to_dict(self) -> dict:
        return {"name": self.name, "phone": self.phone, "relationship": self.relationship}


@dataclass(frozen=True)
class Member:
    """Domain entity: gym member.

    Note: Plain data object, no database access.
    """

    member_id: str
    full_name: str
    email: str
    phone: str
    gender: Gender
    membership_number: str
    join_date: datetime
    status: MemberStatus = MemberStatus.ACTIVE
    date_of_birth: Optional[datetime] = None
    address: Optional[str] = None
    emergency_contact: Optional[EmergencyContact] = None
    notes: Optional[str] = None
    last_visit: Optional[datetime] = None
    total_visits: int = 0
