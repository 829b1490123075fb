"""Discount arithmetic.

Pure functions only: no lookups, no persistence.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import DiscountType
from .model import Discount


@dataclass(frozen=True)
class PricingQuote:
    discount: Optional[Discount]
    original_price: float
    discount_amount: float
    final_price: float

    @property
    def savings(self) -> float:
        return self.discount_amount


def calculate_discount_amount(discount: Discount, original_price: float, *, apply_cap: bool = True) -> float:
    """Amount taken off `original_price`.

    percentage: price * value / 100, limited by max_discount_amount when `apply_cap`.
    fixed: value, never more than the price.
    """
    price = float(original_price)
    if discount.discount_type == DiscountType.PERCENTAGE:
        amount = price * float(discount.value) / 100
        if apply_cap and discount.max_discount_amount:
            amount = min(amount, float(discount.max_discount_amount))
        return amount
    if discount.discount_type == DiscountType.FIXED:
        return min(float(discount.value), price)
    return 0.0


def quote(discount: Optional[Discount], original_price: float, *, apply_cap: bool = True) -> PricingQuote:
    price = float(original_price)
    if discount is None:
        return PricingQuote(discount=None, original_price=price, discount_amount=0.0, final_price=price)
    amount = calculate_discount_amount(discount, price, apply_cap=apply_cap)
    return PricingQuote(
        discount=discount,
        original_price=price,
        discount_amount=amount,
        final_price=max(0.0, price - amount),
    )
