from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional, Sequence

from ..common.datetime_utils import end_of_day, minutes_between, now_local, parse_iso_datetime, start_of_day
from ..common.pagination import Page, normalize_paging
from ..common.validators import require_enum
from ..core.constants import DEFAULT_PAGE_SIZE, MOST_ACTIVE_MEMBERS_LIMIT, OVERVIEW_WINDOW_DAYS, RECENT_ATTENDANCE_DAYS
from ..core.enums import AttendanceStatus, CheckInMethod
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..members.model import Member
from ..members.repository import MemberRepository
from ..packages.repository import PackageRepository
from ..registrations.model import PackageRegistration
from ..registrations.repository import RegistrationRepository
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckInResult:
    attendance: AttendanceRecord
    member: Member
    registration: PackageRegistration
    package_name: Optional[str]


@dataclass(frozen=True)
class CheckOutResult:
    attendance: AttendanceRecord
    workout_duration: int
    checkout_time: datetime


class AttendanceService:
    """Use cases: member check-in / check-out and visit statistics.

    Policy: a member may hold at most one open visit per calendar day.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        members: MemberRepository,
        registrations: RegistrationRepository,
        packages: PackageRepository,
    ):
        self._attendance = attendance
        self._members = members
        self._registrations = registrations
        self._packages = packages

    def check_in(
        self,
        member_id: str,
        *,
        note: Optional[str] = None,
        method: Any = CheckInMethod.MANUAL,
        now: Optional[datetime] = None,
    ) -> CheckInResult:
        now = now or now_local()
        check_in_method = require_enum(CheckInMethod, method or CheckInMethod.MANUAL, "Check-in method")

        member = self._members.get_by_id(member_id)
        if not member:
            raise NotFoundError("Member not found")

        active = self._registrations.list_active_for_member(member_id, now=now, started_only=True)
        if not active:
            raise ValidationError("Member has no active package")
        registration = active[0]

        if self._attendance.find_open_since(member_id, since=start_of_day(now)):
            raise ConflictError("Member already checked in")

        package = self._packages.get_by_id(registration.package_id)
        package_name = package.name if package else None

        attendance_id = self._attendance.create(
            {
                "member_id": member_id,
                "registration_id": registration.registration_id,
                "checkin_time": now,
                "status": AttendanceStatus.CHECKED_IN.value,
                "note": note or f"Check-in with package {package_name or registration.package_id}",
                "check_in_method": check_in_method.value,
            }
        )

        # Unlimited packages carry no counter; limited ones never go below zero.
        if registration.remaining_sessions is not None and registration.remaining_sessions > 0:
            if self._registrations.consume_session(registration.registration_id):
                registration = self._registrations.get_by_id(registration.registration_id) or registration

        self._members.record_visit(member_id, at=now)
        logger.info("Member %s checked in (%s)", member_id, check_in_method.value)

        return CheckInResult(
            attendance=self._attendance.get_by_id(attendance_id),
            member=member,
            registration=registration,
            package_name=package_name,
        )

    def check_out(self, member_id: str, *, note: Optional[str] = None, now: Optional[datetime] = None) -> CheckOutResult:
        now = now or now_local()

        active = self._attendance.find_active_checkin(member_id, since=start_of_day(now))
        if not active:
            raise NotFoundError("No active check-in found")

        duration = minutes_between(active.checkin_time, now)
        new_note = active.note or ""
        if note:
            new_note += f" | Check-out: {note}"

        completed = self._attendance.complete_checkout(
            active.attendance_id,
            checkout_time=now,
            workout_duration=duration,
            note=new_note or None,
        )
        if not completed:
            # Another request completed this visit first.
            raise NotFoundError("No active check-in found")

        logger.info("Member %s checked out after %s minutes", member_id, duration)
        return CheckOutResult(attendance=completed, workout_duration=duration, checkout_time=now)

    def toggle_by_qr(self, qr_code: Optional[str], *, now: Optional[datetime] = None) -> tuple[str, Any]:
        """Scan handler: the payload is a membership number.

        Returns ("checkout", CheckOutResult) when the member is inside, else ("checkin", CheckInResult).
        """
        now = now or now_local()
        membership_number = (qr_code or "").strip()
        if not membership_number:
            raise ValidationError("QR code is required")

        member = self._members.get_by_membership_number(membership_number)
        if not member:
            raise NotFoundError("Member not found")

        if self._attendance.find_active_checkin(member.member_id, since=start_of_day(now)):
            return "checkout", self.check_out(member.member_id, now=now)
        return "checkin", self.check_in(member.member_id, method=CheckInMethod.QR_CODE, now=now)

    def get_today(self, *, now: Optional[datetime] = None) -> dict:
        now = now or now_local()
        records = self._attendance.list_between(start=start_of_day(now), end=end_of_day(now))

        in_gym = [r for r in records if r.checkout_time is None]
        completed = [r for r in records if r.status == AttendanceStatus.COMPLETED]
        members = self._members.get_many([r.member_id for r in records])

        return {
            "date": now.strftime("%Y-%m-%d"),
            "summary": {
                "total_checkins": len(records),
                "currently_in_gym": len(in_gym),
                "completed_sessions": len(completed),
            },
            "currently_in_gym": [
                {
                    "member": self._member_brief(members.get(r.member_id)),
                    "checkin_time": r.checkin_time,
                    "duration": minutes_between(r.checkin_time, now),
                }
                for r in in_gym
            ],
            "all_today_attendance": self._describe(records, members),
        }

    def get_overview(self, *, now: Optional[datetime] = None) -> dict:
        now = now or now_local()
        today_start, today_end = start_of_day(now), end_of_day(now)
        records = self._attendance.list_between(start=today_start, end=today_end)

        durations = [r.workout_duration for r in records if r.workout_duration is not None]
        avg = sum(durations) / len(durations) if durations else 0

        week_start = now - timedelta(days=OVERVIEW_WINDOW_DAYS)
        active_rows = self._attendance.most_active_members(
            start=week_start, end=today_end, limit=MOST_ACTIVE_MEMBERS_LIMIT
        )
        members = self._members.get_many([row["member_id"] for row in active_rows])

        return {
            "today": {
                "date": today_start.strftime("%Y-%m-%d"),
                "total_checkins": len(records),
                "total_checkouts": sum(1 for r in records if r.checkout_time is not None),
                "currently_in_gym": sum(1 for r in records if r.checkout_time is None),
                "avg_workout_duration": int(avg + 0.5),
            },
            "weekly_trend": list(self._attendance.daily_checkins(start=week_start, end=today_end)),
            "most_active_members": [
                dict(row, member=self._member_brief(members[row["member_id"]]))
                for row in active_rows
                if row["member_id"] in members
            ],
        }

    def get_member_history(
        self,
        member_id: str,
        *,
        start=None,
        end=None,
        page=1,
        limit=DEFAULT_PAGE_SIZE,
        now: Optional[datetime] = None,
    ) -> tuple[Page[dict], dict]:
        now = now or now_local()
        if not self._members.get_by_id(member_id):
            raise NotFoundError("Member not found")

        start_dt = self._parse_bound(start, "start_date") or start_of_day(now - timedelta(days=RECENT_ATTENDANCE_DAYS))
        end_dt = self._parse_bound(end, "end_date") or end_of_day(now)
        if end_dt < start_dt:
            raise ValidationError("end_date must be on or after start_date")

        page_i, limit_i = normalize_paging(page, limit, default_limit=DEFAULT_PAGE_SIZE)
        records, total = self._attendance.search(
            member_id=member_id,
            start=start_dt,
            end=end_dt,
            skip=(page_i - 1) * limit_i,
            limit=limit_i,
        )
        total_minutes = self._attendance.total_workout_minutes(member_id)
        statistics = {
            "total_sessions": total,
            "total_workout_minutes": total_minutes,
            "average_session_minutes": int(total_minutes / total + 0.5) if total else 0,
            "period": {"start_date": start_dt, "end_date": end_dt},
        }
        page_obj = Page(items=self._describe(records), page=page_i, limit=limit_i, total=total)
        return page_obj, statistics

    def list_attendance(
        self,
        *,
        member_id: Optional[str] = None,
        status: Optional[str] = None,
        date=None,
        page=1,
        limit=DEFAULT_PAGE_SIZE,
    ) -> Page[dict]:
        if status:
            status = require_enum(AttendanceStatus, status, "Status").value

        start = end = None
        day = self._parse_bound(date, "date")
        if day is not None:
            start, end = start_of_day(day), end_of_day(day)

        page_i, limit_i = normalize_paging(page, limit, default_limit=DEFAULT_PAGE_SIZE)
        records, total = self._attendance.search(
            member_id=member_id,
            status=status,
            start=start,
            end=end,
            skip=(page_i - 1) * limit_i,
            limit=limit_i,
        )
        return Page(items=self._describe(records), page=page_i, limit=limit_i, total=total)

    @staticmethod
    def _parse_bound(value, field_name: str) -> Optional[datetime]:
        try:
            return parse_iso_datetime(value)
        except ValueError:
            raise ValidationError(f"{field_name} is not a valid date")

    @staticmethod
    def _member_brief(member: Optional[Member]) -> Optional[dict]:
        if not member:
            return None
        return {
            "member_id": member.member_id,
            "full_name": member.full_name,
            "phone": member.phone,
            "membership_number": member.membership_number,
        }

    def _describe(self, records: Sequence[AttendanceRecord], members: Optional[dict] = None) -> list[dict]:
        if members is None:
            members = self._members.get_many([r.member_id for r in records])
        return [{"attendance": r, "member": self._member_brief(members.get(r.member_id))} for r in records]
