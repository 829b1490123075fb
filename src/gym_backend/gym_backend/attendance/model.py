from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import AttendanceStatus, CheckInMethod


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one gym visit.

    Open while checkout_time is None.
    """

    attendance_id: str
    member_id: str
    registration_id: str
    checkin_time: datetime
    checkout_time: Optional[datetime] = None
    workout_duration: Optional[int] = None
    status: AttendanceStatus = AttendanceStatus.CHECKED_IN
    note: Optional[str] = None
    check_in_method: CheckInMethod = CheckInMethod.MANUAL

    @property
    def is_open(self) -> bool:
        return self.checkout_time is None
