from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Protocol, Sequence

from .model import WorkSchedule


class ScheduleRepository(Protocol):
    def get_by_id(self, schedule_id: str) -> Optional[WorkSchedule]:
        raise NotImplementedError

    def create(self, fields: dict[str, Any]) -> str:
        raise NotImplementedError

    def update(self, schedule_id: str, fields: dict[str, Any]) -> Optional[WorkSchedule]:
        raise NotImplementedError

    def delete(self, schedule_id: str) -> bool:
        raise NotImplementedError

    def search(
        self,
        *,
        employee_id: Optional[str] = None,
        day_start: Optional[datetime] = None,
        day_end: Optional[datetime] = None,
        status: Optional[str] = None,
        shift_type: Optional[str] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[Sequence[WorkSchedule], int]:
        """Newest work_date first, then earliest start_time."""

        raise NotImplementedError
