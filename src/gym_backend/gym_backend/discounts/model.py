from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import DiscountStatus, DiscountType


@dataclass(frozen=True)
class Discount:
    """Domain entity: promotional discount rule."""

    discount_id: str
    code: str
    discount_type: DiscountType
    value: float
    start_date: datetime
    end_date: datetime
    name: Optional[str] = None
    description: Optional[str] = None
    max_discount_amount: Optional[float] = None
    applicable_packages: tuple[str, ...] = field(default_factory=tuple)
    usage_limit: Optional[int] = None
    used_count: int = 0
    status: DiscountStatus = DiscountStatus.ACTIVE

    def is_within_window(self, now: datetime) -> bool:
        return self.start_date <= now <= self.end_date

    def is_usage_exhausted(self) -> bool:
        return bool(self.usage_limit) and self.used_count >= int(self.usage_limit)

    def applies_to(self, package_id: Optional[str]) -> bool:
        if not package_id or not self.applicable_packages:
            return True
        return str(package_id) in self.applicable_packages
