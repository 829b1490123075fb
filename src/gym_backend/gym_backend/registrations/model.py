from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import PaymentMethod, RegistrationStatus


@dataclass(frozen=True)
class PackageRegistration:
    """Domain entity: a member's purchase of a package for a date range."""

    registration_id: str
    member_id: str
    package_id: str
    start_date: datetime
    end_date: datetime
    original_price: float
    final_price: float
    discount_amount: float = 0.0
    discount_id: Optional[str] = None
    remaining_sessions: Optional[int] = None
    payment_method: PaymentMethod = PaymentMethod.CASH
    status: RegistrationStatus = RegistrationStatus.ACTIVE
    status_reason: Optional[str] = None
    registration_date: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def is_active_at(self, now: datetime) -> bool:
        return self.status == RegistrationStatus.ACTIVE and self.start_date <= now <= self.end_date

    def has_unlimited_sessions(self) -> bool:
        return self.remaining_sessions is None
