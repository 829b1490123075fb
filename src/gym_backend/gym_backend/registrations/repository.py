from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Protocol, Sequence

from .model import PackageRegistration


class RegistrationRepository(Protocol):
    def get_by_id(self, registration_id: str) -> Optional[PackageRegistration]:
        raise NotImplementedError

    def create(self, fields: dict[str, Any]) -> str:
        raise NotImplementedError

    def find_unexpired_for_member(self, member_id: str, *, now: datetime) -> Optional[PackageRegistration]:
        """Any registration of the member whose end_date is still in the future, whatever its status."""

        raise NotImplementedError

    def list_active_for_member(
        self, member_id: str, *, now: datetime, started_only: bool = False
    ) -> Sequence[PackageRegistration]:
        """Registrations with status active and end_date >= now, newest first.

        With `started_only`, also require start_date <= now.
        """

        raise NotImplementedError

    def count_active_for_member(self, member_id: str, *, now: datetime) -> int:
        raise NotImplementedError

    def search(
        self,
        *,
        member_id: Optional[str] = None,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 10,
    ) -> tuple[Sequence[PackageRegistration], int]:
        raise NotImplementedError

    def update_status(
        self, registration_id: str, status: str, reason: Optional[str], *, at: datetime
    ) -> Optional[PackageRegistration]:
        raise NotImplementedError

    def consume_session(self, registration_id: str) -> bool:
        """Decrement remaining_sessions only while it is > 0. Returns whether a session was taken."""

        raise NotImplementedError
