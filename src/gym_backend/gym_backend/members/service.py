from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local, parse_iso_datetime, start_of_month
from ..common.pagination import Page, normalize_paging
from ..common.validators import require_email, require_enum, require_non_empty
from ..core.constants import (
    DEFAULT_PAGE_SIZE,
    MEMBERSHIP_NUMBER_PREFIX,
    RECENT_ATTENDANCE_DAYS,
    RECENT_ATTENDANCE_LIMIT,
)
from ..core.enums import Gender, MemberStatus
from ..core.exceptions import ConflictError, NotFoundError
from ..registrations.model import PackageRegistration
from ..registrations.repository import RegistrationRepository
from .model import EmergencyContact, Member
from .repository import MemberRepository

logger = logging.getLogger(__name__)

_IMMUTABLE_FIELDS = {"membership_number", "join_date", "member_id", "total_visits", "last_visit"}
_UPDATABLE_FIELDS = {
    "full_name",
    "email",
    "phone",
    "date_of_birth",
    "gender",
    "address",
    "status",
    "emergency_contact",
    "notes",
}


@dataclass(frozen=True)
class MemberDetail:
    member: Member
    active_packages: Sequence[PackageRegistration]
    recent_attendance: Sequence[AttendanceRecord]
    statistics: dict


class MemberService:
    """Use cases: manage member records."""

    def __init__(
        self,
        members: MemberRepository,
        registrations: RegistrationRepository,
        attendance: AttendanceRepository,
    ):
        self._members = members
        self._registrations = registrations
        self._attendance = attendance

    def generate_membership_number(self, *, now: Optional[datetime] = None) -> str:
        now = now or now_local()
        count = self._members.count()
        return f"{MEMBERSHIP_NUMBER_PREFIX}{now.year}{count + 1:04d}"

    def create_member(self, data: dict[str, Any], *, now: Optional[datetime] = None) -> Member:
        now = now or now_local()
        full_name = require_non_empty(data.get("full_name"), "Full name")
        email = require_email(data.get("email"))
        phone = require_non_empty(data.get("phone"), "Phone")
        gender = require_enum(Gender, data.get("gender"), "Gender")

        if self._members.get_by_email(email):
            raise ConflictError("Email is already in use")

        contact = EmergencyContact.from_dict(data.get("emergency_contact"))
        member_id = self._members.create(
            {
                "full_name": full_name,
                "email": email,
                "phone": phone,
                "gender": gender.value,
                "date_of_birth": parse_iso_datetime(data.get("date_of_birth")),
                "address": data.get("address"),
                "emergency_contact": contact.to_dict() if contact else None,
                "notes": data.get("notes"),
                "membership_number": self.generate_membership_number(now=now),
                "status": MemberStatus.ACTIVE.value,
                "join_date": now,
            }
        )
        logger.info("Created member %s (%s)", member_id, email)
        return self._require(member_id)

    def list_members(
        self,
        *,
        status: Optional[str] = None,
        gender: Optional[str] = None,
        search: Optional[str] = None,
        has_active_package: bool = False,
        page=1,
        limit=DEFAULT_PAGE_SIZE,
        now: Optional[datetime] = None,
    ) -> Page[dict]:
        now = now or now_local()
        page_i, limit_i = normalize_paging(page, limit, default_limit=DEFAULT_PAGE_SIZE)
        members, total = self._members.search(
            status=status,
            gender=gender,
            search=search,
            skip=(page_i - 1) * limit_i,
            limit=limit_i,
        )

        items: list[dict] = []
        for m in members:
            item = {"member": m, "active_package": None}
            if has_active_package:
                active = self._registrations.list_active_for_member(m.member_id, now=now)
                if not active:
                    continue
                item["active_package"] = active[0]
            items.append(item)

        return Page(items=items, page=page_i, limit=limit_i, total=total)

    def get_member(self, member_id: str) -> Member:
        return self._require(member_id)

    def get_member_detail(self, member_id: str, *, now: Optional[datetime] = None) -> MemberDetail:
        now = now or now_local()
        member = self._require(member_id)

        active_packages = self._registrations.list_active_for_member(member_id, now=now)
        recent, _ = self._attendance.search(
            member_id=member_id,
            start=now - timedelta(days=RECENT_ATTENDANCE_DAYS),
            skip=0,
            limit=RECENT_ATTENDANCE_LIMIT,
        )
        total_sessions = self._attendance.count(member_id=member_id)
        month_sessions = self._attendance.count(member_id=member_id, start=start_of_month(now))

        return MemberDetail(
            member=member,
            active_packages=active_packages,
            recent_attendance=recent,
            statistics={
                "total_sessions": total_sessions,
                "this_month_sessions": month_sessions,
                "member_since": member.join_date,
                "days_since_member": (now - member.join_date).days,
            },
        )

    def update_member(self, member_id: str, data: dict[str, Any]) -> Member:
        changes = {k: v for k, v in data.items() if k in _UPDATABLE_FIELDS and k not in _IMMUTABLE_FIELDS}

        if "full_name" in changes:
            changes["full_name"] = require_non_empty(changes["full_name"], "Full name")
        if "phone" in changes:
            changes["phone"] = require_non_empty(changes["phone"], "Phone")
        if "gender" in changes:
            changes["gender"] = require_enum(Gender, changes["gender"], "Gender").value
        if "status" in changes:
            changes["status"] = require_enum(MemberStatus, changes["status"], "Status").value
        if "date_of_birth" in changes:
            changes["date_of_birth"] = parse_iso_datetime(changes["date_of_birth"])
        if "emergency_contact" in changes:
            contact = EmergencyContact.from_dict(changes["emergency_contact"])
            changes["emergency_contact"] = contact.to_dict() if contact else None
        if "email" in changes:
            email = require_email(changes["email"])
            other = self._members.get_by_email(email)
            if other and other.member_id != member_id:
                raise ConflictError("Email is already in use")
            changes["email"] = email

        member = self._members.update(member_id, changes)
        if not member:
            raise NotFoundError("Member not found")
        return member

    def delete_member(self, member_id: str, *, now: Optional[datetime] = None) -> Member:
        now = now or now_local()
        member = self._require(member_id)

        active = self._registrations.count_active_for_member(member_id, now=now)
        if active > 0:
            raise ConflictError(
                "Cannot delete a member with an active package",
                details={"active_packages": active},
            )

        if not self._members.delete(member_id):
            raise NotFoundError("Member not found")
        logger.info("Deleted member %s", member_id)
        return member

    def get_active_packages(self, member_id: str, *, now: Optional[datetime] = None) -> tuple[Member, Sequence[PackageRegistration]]:
        now = now or now_local()
        member = self._require(member_id)
        packages = self._registrations.list_active_for_member(member_id, now=now, started_only=True)
        return member, packages

    def _require(self, member_id: str) -> Member:
        member = self._members.get_by_id(member_id)
        if not member:
            raise NotFoundError("Member not found")
        return member
