from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Protocol, Sequence

from .model import Member


class MemberRepository(Protocol):
    """Repository interface for Member.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, member_id: str) -> Optional[Member]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Member]:
        raise NotImplementedError

    def get_by_membership_number(self, membership_number: str) -> Optional[Member]:
        raise NotImplementedError

    def get_many(self, member_ids: Sequence[str]) -> dict[str, Member]:
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError

    def create(self, fields: dict[str, Any]) -> str:
        raise NotImplementedError

    def update(self, member_id: str, fields: dict[str, Any]) -> Optional[Member]:
        raise NotImplementedError

    def delete(self, member_id: str) -> bool:
        raise NotImplementedError

    def search(
        self,
        *,
        status: Optional[str] = None,
        gender: Optional[str] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[Sequence[Member], int]:
        """Filtered members, newest join date first, plus the total match count."""

        raise NotImplementedError

    def record_visit(self, member_id: str, *, at: datetime) -> None:
        raise NotImplementedError
