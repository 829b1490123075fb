from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any, Optional, Sequence

from ..common.datetime_utils import now_local, parse_iso_datetime
from ..common.pagination import Page, normalize_paging
from ..common.validators import require_enum, require_int, require_non_empty, require_number
from ..core.constants import DEFAULT_PAGE_SIZE, DISCOUNT_EXPIRING_SOON_DAYS
from ..core.enums import DiscountStatus, DiscountType
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from .model import Discount
from .pricing import PricingQuote, quote
from .repository import DiscountRepository

logger = logging.getLogger(__name__)

_FIELDS = (
    "code",
    "name",
    "description",
    "discount_type",
    "value",
    "max_discount_amount",
    "start_date",
    "end_date",
    "applicable_packages",
    "usage_limit",
    "status",
)


class DiscountService:
    """Use cases: promotional discounts and code redemption."""

    def __init__(self, discounts: DiscountRepository):
        self._discounts = discounts

    # ----- validation -----

    @staticmethod
    def _clean(data: dict[str, Any]) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if "type" in data and "discount_type" not in data:
            data = dict(data, discount_type=data["type"])

        if "code" in data:
            out["code"] = require_non_empty(data["code"], "Code")
        if "name" in data:
            out["name"] = data["name"]
        if "description" in data:
            out["description"] = data["description"]
        if "discount_type" in data:
            out["discount_type"] = require_enum(DiscountType, data["discount_type"], "Discount type").value
        if "value" in data:
            out["value"] = require_number(data["value"], "Value", minimum=0)
        if "max_discount_amount" in data:
            raw = data["max_discount_amount"]
            out["max_discount_amount"] = None if raw in (None, "") else require_number(raw, "Max discount amount", minimum=0)
        for key, label in (("start_date", "Start date"), ("end_date", "End date")):
            if key in data:
                try:
                    out[key] = parse_iso_datetime(data[key])
                except ValueError:
                    raise ValidationError(f"{label} is not a valid date")
        if "applicable_packages" in data:
            out["applicable_packages"] = [str(p) for p in (data["applicable_packages"] or [])]
        if "usage_limit" in data:
            raw = data["usage_limit"]
            out["usage_limit"] = None if raw in (None, "") else require_int(raw, "Usage limit", minimum=1)
        if "status" in data:
            out["status"] = require_enum(DiscountStatus, data["status"], "Status").value
        return out

    @staticmethod
    def _check_rules(fields: dict[str, Any]) -> None:
        for key, label in (("code", "Code"), ("discount_type", "Discount type"), ("value", "Value"), ("start_date", "Start date"), ("end_date", "End date")):
            if fields.get(key) is None:
                raise ValidationError(f"{label} is required")
        if fields["end_date"] < fields["start_date"]:
            raise ValidationError("end_date must be on or after start_date")
        if fields["discount_type"] == DiscountType.PERCENTAGE.value and fields["value"] > 100:
            raise ValidationError("Percentage value must be <= 100")

    @staticmethod
    def _as_fields(d: Discount) -> dict[str, Any]:
        return {
            "code": d.code,
            "name": d.name,
            "description": d.description,
            "discount_type": d.discount_type.value,
            "value": d.value,
            "max_discount_amount": d.max_discount_amount,
            "start_date": d.start_date,
            "end_date": d.end_date,
            "applicable_packages": list(d.applicable_packages),
            "usage_limit": d.usage_limit,
            "status": d.status.value,
        }

    def _refresh_expired(self, now: datetime) -> None:
        expired = self._discounts.expire_past_due(now=now)
        if expired:
            logger.info("Marked %s discount(s) as expired", expired)

    # ----- CRUD -----

    def create_discount(self, data: dict[str, Any], *, now: Optional[datetime] = None) -> Discount:
        now = now or now_local()
        fields = self._clean(data)
        fields.setdefault("status", DiscountStatus.ACTIVE.value)
        self._check_rules(fields)

        if self._discounts.get_by_code(fields["code"]):
            raise ConflictError("Discount code already exists")

        discount_id = self._discounts.create({k: fields.get(k) for k in _FIELDS})
        return self.get_discount(discount_id, now=now)

    def list_discounts(
        self,
        *,
        status: Optional[str] = None,
        discount_type: Optional[str] = None,
        page=1,
        limit=DEFAULT_PAGE_SIZE,
        now: Optional[datetime] = None,
    ) -> Page[Discount]:
        self._refresh_expired(now or now_local())
        page_i, limit_i = normalize_paging(page, limit, default_limit=DEFAULT_PAGE_SIZE)
        items, total = self._discounts.search(
            status=status,
            discount_type=discount_type,
            skip=(page_i - 1) * limit_i,
            limit=limit_i,
        )
        return Page(items=items, page=page_i, limit=limit_i, total=total)

    def get_discount(self, discount_id: str, *, now: Optional[datetime] = None) -> Discount:
        now = now or now_local()
        discount = self._discounts.get_by_id(discount_id)
        if not discount:
            raise NotFoundError("Discount not found")
        if discount.status != DiscountStatus.EXPIRED and discount.end_date < now:
            self._refresh_expired(now)
            discount = replace(discount, status=DiscountStatus.EXPIRED)
        return discount

    def update_discount(self, discount_id: str, data: dict[str, Any], *, now: Optional[datetime] = None) -> Discount:
        current = self._discounts.get_by_id(discount_id)
        if not current:
            raise NotFoundError("Discount not found")

        changes = self._clean(data)
        merged = dict(self._as_fields(current), **changes)
        self._check_rules(merged)

        if "code" in changes:
            other = self._discounts.get_by_code(changes["code"])
            if other and other.discount_id != discount_id:
                raise ConflictError("Discount code already exists")

        if not self._discounts.update(discount_id, changes):
            raise NotFoundError("Discount not found")
        return self.get_discount(discount_id, now=now)

    def delete_discount(self, discount_id: str) -> Discount:
        discount = self._discounts.get_by_id(discount_id)
        if not discount or not self._discounts.delete(discount_id):
            raise NotFoundError("Discount not found")
        return discount

    def get_active_discounts(self, *, now: Optional[datetime] = None) -> Sequence[Discount]:
        now = now or now_local()
        self._refresh_expired(now)
        return self._discounts.list_active(now=now)

    # ----- redemption -----

    def validate_code(self, code: str, package_id: Optional[str] = None, *, now: Optional[datetime] = None) -> Discount:
        now = now or now_local()
        discount = self._discounts.find_active_by_code(str(code or "").strip(), now=now)
        if not discount:
            raise ValidationError("Invalid or expired discount code")

        if discount.is_usage_exhausted():
            raise ValidationError("Discount code usage exhausted")

        if not discount.applies_to(package_id):
            raise ValidationError("Discount code is not applicable to this package")

        return discount

    def apply_discount(
        self,
        code: str,
        package_id: Optional[str],
        original_price: float,
        *,
        now: Optional[datetime] = None,
    ) -> PricingQuote:
        """Price a package with a discount code.

        Does not consume the code: call `increment_usage` once the purchase is committed.
        """
        price = require_number(original_price, "Original price", minimum=0)
        discount = self.validate_code(code, package_id, now=now)
        return quote(discount, price)

    def increment_usage(self, discount_id: str) -> None:
        if not self._discounts.increment_usage(discount_id):
            raise NotFoundError("Discount not found")

    def get_statistics(self, *, now: Optional[datetime] = None) -> dict:
        now = now or now_local()
        self._refresh_expired(now)
        return {
            "by_status": list(self._discounts.usage_by_status()),
            "total_active": self._discounts.count_active(now=now),
            "expiring_soon": self._discounts.count_expiring(
                now=now, until=now + timedelta(days=DISCOUNT_EXPIRING_SOON_DAYS)
            ),
        }
