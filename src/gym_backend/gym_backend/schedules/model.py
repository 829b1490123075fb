from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import ScheduleStatus, ShiftType


@dataclass(frozen=True)
class WorkSchedule:
    """Domain entity: one employee shift on a given date.

    start_time / end_time are "HH:MM" strings.
    """

    schedule_id: str
    employee_id: str
    work_date: datetime
    start_time: str
    end_time: str
    shift_type: ShiftType = ShiftType.MORNING
    status: ScheduleStatus = ScheduleStatus.SCHEDULED
    notes: Optional[str] = None
