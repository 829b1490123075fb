from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Sequence

from ..common.datetime_utils import add_days, now_local
from ..common.pagination import Page, normalize_paging
from ..common.validators import require_enum
from ..core.constants import DEFAULT_REGISTRATION_PAGE_SIZE
from ..core.enums import PaymentMethod, RegistrationStatus
from ..core.exceptions import ConflictError, NotFoundError
from ..discounts.pricing import quote
from ..discounts.repository import DiscountRepository
from ..members.repository import MemberRepository
from ..notifications.mailer import Notifier
from ..notifications.templates import registration_confirmation_email
from ..packages.repository import PackageRepository
from .model import PackageRegistration
from .repository import RegistrationRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegistrationSummary:
    member_name: str
    package_name: str
    duration_days: int
    start_date: datetime
    end_date: datetime
    original_price: float
    discount_amount: float
    final_price: float
    payment_method: PaymentMethod


@dataclass(frozen=True)
class RegistrationResult:
    registration: PackageRegistration
    summary: RegistrationSummary
    email_sent: bool


class RegistrationService:
    """Use cases: sell packages to members."""

    def __init__(
        self,
        members: MemberRepository,
        packages: PackageRepository,
        discounts: DiscountRepository,
        registrations: RegistrationRepository,
        notifier: Notifier,
    ):
        self._members = members
        self._packages = packages
        self._discounts = discounts
        self._registrations = registrations
        self._notifier = notifier

    def create_registration(
        self,
        member_id: str,
        package_id: str,
        *,
        discount_id: Optional[str] = None,
        payment_method: str = PaymentMethod.CASH.value,
        now: Optional[datetime] = None,
    ) -> RegistrationResult:
        now = now or now_local()
        payment = require_enum(PaymentMethod, payment_method or PaymentMethod.CASH.value, "Payment method")

        member = self._members.get_by_id(member_id)
        if not member:
            raise NotFoundError("Member not found")

        package = self._packages.get_by_id(package_id)
        if not package:
            raise NotFoundError("Package not found")

        existing = self._registrations.find_unexpired_for_member(member_id, now=now)
        if existing:
            raise ConflictError("Member already has an active package", details={"active_package": existing})

        start_date = now
        end_date = add_days(now, package.duration_days)

        # Unknown or out-of-window discounts are ignored, the sale goes through at full price.
        discount = self._discounts.get_by_id(discount_id) if discount_id else None
        if discount and not discount.is_within_window(now):
            discount = None
        pricing = quote(discount, package.price, apply_cap=False)

        registration_id = self._registrations.create(
            {
                "member_id": member.member_id,
                "package_id": package.package_id,
                "discount_id": discount.discount_id if discount else None,
                "start_date": start_date,
                "end_date": end_date,
                "remaining_sessions": package.max_sessions,
                "payment_method": payment.value,
                "original_price": pricing.original_price,
                "discount_amount": pricing.discount_amount,
                "final_price": pricing.final_price,
                "status": RegistrationStatus.ACTIVE.value,
                "registration_date": now,
            }
        )
        if discount:
            self._discounts.increment_usage(discount.discount_id)

        registration = self._registrations.get_by_id(registration_id)
        logger.info(
            "Registered member %s for package %s (final price %s)",
            member.member_id,
            package.code,
            pricing.final_price,
        )

        subject, html = registration_confirmation_email(
            full_name=member.full_name,
            package_name=package.name,
            duration_days=package.duration_days,
            start_date=start_date,
            end_date=end_date,
            original_price=pricing.original_price,
            discount_amount=pricing.discount_amount,
            final_price=pricing.final_price,
        )
        email_sent = self._notifier.notify(member.email, subject, html)

        return RegistrationResult(
            registration=registration,
            summary=RegistrationSummary(
                member_name=member.full_name,
                package_name=package.name,
                duration_days=package.duration_days,
                start_date=start_date,
                end_date=end_date,
                original_price=pricing.original_price,
                discount_amount=pricing.discount_amount,
                final_price=pricing.final_price,
                payment_method=payment,
            ),
            email_sent=email_sent,
        )

    def list_registrations(
        self,
        *,
        member_id: Optional[str] = None,
        status: Optional[str] = None,
        page=1,
        limit=DEFAULT_REGISTRATION_PAGE_SIZE,
    ) -> Page[dict]:
        page_i, limit_i = normalize_paging(page, limit, default_limit=DEFAULT_REGISTRATION_PAGE_SIZE)
        items, total = self._registrations.search(
            member_id=member_id,
            status=status,
            skip=(page_i - 1) * limit_i,
            limit=limit_i,
        )
        return Page(items=self._describe(items), page=page_i, limit=limit_i, total=total)

    def get_registration(self, registration_id: str) -> dict:
        registration = self._registrations.get_by_id(registration_id)
        if not registration:
            raise NotFoundError("Registration not found")
        return self._describe([registration])[0]

    def update_status(
        self,
        registration_id: str,
        status: Any,
        reason: Optional[str] = None,
        *,
        now: Optional[datetime] = None,
    ) -> PackageRegistration:
        now = now or now_local()
        new_status = require_enum(RegistrationStatus, status, "Status")
        registration = self._registrations.update_status(registration_id, new_status.value, reason, at=now)
        if not registration:
            raise NotFoundError("Registration not found")
        logger.info("Registration %s is now %s", registration_id, new_status.value)
        return registration

    def get_member_active_packages(self, member_id: str, *, now: Optional[datetime] = None) -> Sequence[dict]:
        now = now or now_local()
        return self._describe(self._registrations.list_active_for_member(member_id, now=now))

    def _describe(self, registrations: Sequence[PackageRegistration]) -> list[dict]:
        """Attach member/package/discount summaries to each registration."""
        members = self._members.get_many([r.member_id for r in registrations])
        packages: dict[str, Any] = {}
        discounts: dict[str, Any] = {}
        out = []
        for r in registrations:
            if r.package_id not in packages:
                packages[r.package_id] = self._packages.get_by_id(r.package_id)
            if r.discount_id and r.discount_id not in discounts:
                discounts[r.discount_id] = self._discounts.get_by_id(r.discount_id)

            member = members.get(r.member_id)
            package = packages[r.package_id]
            discount = discounts.get(r.discount_id) if r.discount_id else None
            out.append(
                {
                    "registration": r,
                    "member": (
                        {"member_id": member.member_id, "full_name": member.full_name, "email": member.email, "phone": member.phone}
                        if member
                        else None
                    ),
                    "package": (
                        {
                            "package_id": package.package_id,
                            "name": package.name,
                            "duration_days": package.duration_days,
                            "price": package.price,
                            "features": list(package.features),
                        }
                        if package
                        else None
                    ),
                    "discount": (
                        {"discount_id": discount.discount_id, "name": discount.name, "type": discount.discount_type, "value": discount.value}
                        if discount
                        else None
                    ),
                }
            )
        return out
