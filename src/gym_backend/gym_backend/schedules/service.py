from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Optional

from ..common.datetime_utils import parse_iso_datetime, start_of_day
from ..common.pagination import Page, normalize_paging
from ..common.validators import hhmm_to_minutes, require_enum, require_hhmm
from ..core.constants import DEFAULT_PAGE_SIZE
from ..core.enums import ScheduleStatus, ShiftType
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from .model import WorkSchedule
from .repository import ScheduleRepository


class ScheduleService:
    def __init__(self, schedules: ScheduleRepository, employees: EmployeeRepository):
        self._schedules = schedules
        self._employees = employees

    @staticmethod
    def _parse_day(value, field_name: str) -> Optional[datetime]:
        try:
            day = parse_iso_datetime(value)
        except ValueError:
            raise ValidationError(f"{field_name} is not a valid date")
        return start_of_day(day) if day else None

    def _clean(self, data: dict[str, Any]) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if "employee_id" in data:
            out["employee_id"] = str(data["employee_id"] or "")
        if "work_date" in data or "date" in data:
            out["work_date"] = self._parse_day(data.get("work_date", data.get("date")), "Work date")
        if "start_time" in data:
            out["start_time"] = require_hhmm(data["start_time"], "Start time")
        if "end_time" in data:
            out["end_time"] = require_hhmm(data["end_time"], "End time")
        if "shift_type" in data:
            out["shift_type"] = require_enum(ShiftType, data["shift_type"], "Shift type").value
        if "status" in data:
            out["status"] = require_enum(ScheduleStatus, data["status"], "Status").value
        if "notes" in data:
            out["notes"] = data["notes"]
        return out

    def _check(self, merged: dict[str, Any]) -> None:
        if not merged.get("employee_id"):
            raise ValidationError("Employee is required")
        if merged.get("work_date") is None:
            raise ValidationError("Work date is required")
        if not merged.get("start_time") or not merged.get("end_time"):
            raise ValidationError("Start time and end time are required")
        if hhmm_to_minutes(merged["end_time"]) <= hhmm_to_minutes(merged["start_time"]):
            raise ValidationError("End time must be after start time")
        if not self._employees.get_by_id(merged["employee_id"]):
            raise NotFoundError("Employee not found")

    def create_schedule(self, data: dict[str, Any]) -> WorkSchedule:
        fields = self._clean(data)
        fields.setdefault("shift_type", ShiftType.MORNING.value)
        fields.setdefault("status", ScheduleStatus.SCHEDULED.value)
        self._check(fields)

        schedule_id = self._schedules.create(fields)
        return self.get_schedule(schedule_id)

    def list_schedules(
        self,
        *,
        employee_id: Optional[str] = None,
        date=None,
        status: Optional[str] = None,
        shift_type: Optional[str] = None,
        page=1,
        limit=DEFAULT_PAGE_SIZE,
    ) -> Page[WorkSchedule]:
        day = self._parse_day(date, "date")
        page_i, limit_i = normalize_paging(page, limit, default_limit=DEFAULT_PAGE_SIZE)
        items, total = self._schedules.search(
            employee_id=employee_id,
            day_start=day,
            day_end=day + timedelta(days=1) if day else None,
            status=status,
            shift_type=shift_type,
            skip=(page_i - 1) * limit_i,
            limit=limit_i,
        )
        return Page(items=items, page=page_i, limit=limit_i, total=total)

    def get_schedule(self, schedule_id: str) -> WorkSchedule:
        schedule = self._schedules.get_by_id(schedule_id)
        if not schedule:
            raise NotFoundError("Work schedule not found")
        return schedule

    def update_schedule(self, schedule_id: str, data: dict[str, Any]) -> WorkSchedule:
        current = self.get_schedule(schedule_id)
        changes = self._clean(data)
        merged = {
            "employee_id": current.employee_id,
            "work_date": current.work_date,
            "start_time": current.start_time,
            "end_time": current.end_time,
        }
        merged.update(changes)
        self._check(merged)

        schedule = self._schedules.update(schedule_id, changes)
        if not schedule:
            raise NotFoundError("Work schedule not found")
        return schedule

    def delete_schedule(self, schedule_id: str) -> WorkSchedule:
        schedule = self.get_schedule(schedule_id)
        if not self._schedules.delete(schedule_id):
            raise NotFoundError("Work schedule not found")
        return schedule

    def describe(self, schedules) -> list[dict]:
        """Attach a short employee summary to each schedule."""
        employees = self._employees.get_many([s.employee_id for s in schedules])
        out = []
        for s in schedules:
            e = employees.get(s.employee_id)
            out.append(
                {
                    "schedule": s,
                    "employee": (
                        {"employee_id": e.employee_id, "full_name": e.full_name, "email": e.email, "position": e.position, "department": e.department}
                        if e
                        else None
                    ),
                }
            )
        return out
