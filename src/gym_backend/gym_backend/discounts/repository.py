from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Protocol, Sequence

from .model import Discount


class DiscountRepository(Protocol):
    def get_by_id(self, discount_id: str) -> Optional[Discount]:
        raise NotImplementedError

    def get_by_code(self, code: str) -> Optional[Discount]:
        raise NotImplementedError

    def find_active_by_code(self, code: str, *, now: datetime) -> Optional[Discount]:
        """Discount with status active whose [start_date, end_date] contains `now`."""

        raise NotImplementedError

    def list_active(self, *, now: datetime) -> Sequence[Discount]:
        raise NotImplementedError

    def create(self, fields: dict[str, Any]) -> str:
        raise NotImplementedError

    def update(self, discount_id: str, fields: dict[str, Any]) -> Optional[Discount]:
        raise NotImplementedError

    def delete(self, discount_id: str) -> bool:
        raise NotImplementedError

    def search(
        self,
        *,
        status: Optional[str] = None,
        discount_type: Optional[str] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[Sequence[Discount], int]:
        raise NotImplementedError

    def increment_usage(self, discount_id: str) -> bool:
        raise NotImplementedError

    def expire_past_due(self, *, now: datetime) -> int:
        """Flip every non-expired discount with end_date < now to expired; returns how many."""

        raise NotImplementedError

    def usage_by_status(self) -> Sequence[dict]:
        """Rows of {status, count, total_usage}."""

        raise NotImplementedError

    def count_active(self, *, now: datetime) -> int:
        raise NotImplementedError

    def count_expiring(self, *, now: datetime, until: datetime) -> int:
        raise NotImplementedError
