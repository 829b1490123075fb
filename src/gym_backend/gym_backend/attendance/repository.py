from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create(self, fields: dict[str, Any]) -> str:
        raise NotImplementedError

    def find_open_since(self, member_id: str, *, since: datetime) -> Optional[AttendanceRecord]:
        """Record checked in at or after `since` that has no checkout_time yet."""

        raise NotImplementedError

    def find_active_checkin(self, member_id: str, *, since: datetime) -> Optional[AttendanceRecord]:
        """Like `find_open_since`, additionally requiring status checked_in."""

        raise NotImplementedError

    def complete_checkout(
        self,
        attendance_id: str,
        *,
        checkout_time: datetime,
        workout_duration: int,
        note: Optional[str],
    ) -> Optional[AttendanceRecord]:
        """Move a record from checked_in to completed.

        Conditional on the current status, so only one caller can complete a visit.
        Returns None when the record was not in checked_in.
        """

        raise NotImplementedError

    def list_between(
        self, *, start: datetime, end: datetime, member_id: Optional[str] = None
    ) -> Sequence[AttendanceRecord]:
        """Records whose checkin_time is in [start, end], newest first."""

        raise NotImplementedError

    def search(
        self,
        *,
        member_id: Optional[str] = None,
        status: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[Sequence[AttendanceRecord], int]:
        raise NotImplementedError

    def count(
        self,
        *,
        member_id: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> int:
        raise NotImplementedError

    def total_workout_minutes(self, member_id: str) -> int:
        raise NotImplementedError

    def daily_checkins(self, *, start: datetime, end: datetime) -> Sequence[dict]:
        """Rows of {date: 'YYYY-MM-DD', count}, ascending by date."""

        raise NotImplementedError

    def most_active_members(self, *, start: datetime, end: datetime, limit: int) -> Sequence[dict]:
        """Rows of {member_id, visit_count, last_visit}, busiest first."""

        raise NotImplementedError
