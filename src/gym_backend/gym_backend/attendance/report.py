from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..common.datetime_utils import minutes_between
from ..members.repository import MemberRepository
from .repository import AttendanceRepository

REPORT_FIELDS = [
    "date",
    "member_id",
    "membership_number",
    "full_name",
    "check_in",
    "check_out",
    "workout_minutes",
    "status",
    "method",
    "note",
]


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: list[dict]


class AttendanceReportService:
    def __init__(self, attendance: AttendanceRepository, members: MemberRepository):
        self._attendance = attendance
        self._members = members

    def build_report(self, *, start: date, end: date, member_id: Optional[str] = None) -> ReportData:
        records = self._attendance.list_between(
            start=datetime.combine(start, time.min),
            end=datetime.combine(end, time.max),
            member_id=member_id,
        )
        members = self._members.get_many([r.member_id for r in records])

        summary_map: dict[str, dict] = {}
        out_rows: list[dict] = []

        for r in sorted(records, key=lambda x: x.checkin_time):
            member = members.get(r.member_id)
            if r.workout_duration is not None:
                minutes = int(r.workout_duration)
            elif r.checkout_time is not None:
                minutes = minutes_between(r.checkin_time, r.checkout_time)
            else:
                minutes = 0

            out_rows.append(
                {
                    "date": r.checkin_time.strftime("%Y-%m-%d"),
                    "member_id": r.member_id,
                    "membership_number": member.membership_number if member else "-",
                    "full_name": member.full_name if member else "-",
                    "check_in": r.checkin_time.strftime("%H:%M"),
                    "check_out": r.checkout_time.strftime("%H:%M") if r.checkout_time else "-",
                    "workout_minutes": minutes,
                    "status": r.status.value,
                    "method": r.check_in_method.value,
                    "note": r.note or "",
                }
            )

            s = summary_map.get(r.member_id)
            if not s:
                s = {
                    "member_id": r.member_id,
                    "full_name": member.full_name if member else "-",
                    "visits": 0,
                    "total_minutes": 0,
                }
                summary_map[r.member_id] = s
            s["visits"] += 1
            s["total_minutes"] += minutes

        summary = sorted(summary_map.values(), key=lambda x: x["total_minutes"], reverse=True)
        return ReportData(rows=out_rows, summary=summary)
