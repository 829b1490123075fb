from __future__ import annotations

from datetime import datetime

from src.gym_backend.gym_backend.core.enums import DiscountType
from src.gym_backend.gym_backend.discounts.model import Discount
from src.gym_backend.gym_backend.discounts.pricing import calculate_discount_amount, quote


def _discount(discount_type: DiscountType, value: float, *, cap=None) -> Discount:
    return Discount(
        discount_id="d1",
        code="SPRING",
        discount_type=discount_type,
        value=value,
        start_date=datetime(2025, 1, 1),
        end_date=datetime(2025, 12, 31),
        max_discount_amount=cap,
    )


def test_fixed_discount_takes_value_off_price():
    q = quote(_discount(DiscountType.FIXED, 100000), 500000)
    assert q.discount_amount == 100000
    assert q.final_price == 400000


def test_percentage_discount_without_cap():
    q = quote(_discount(DiscountType.PERCENTAGE, 20), 500000)
    assert q.discount_amount == 100000
    assert q.final_price == 400000


def test_percentage_discount_is_capped_only_when_asked():
    discount = _discount(DiscountType.PERCENTAGE, 50, cap=100000)
    assert calculate_discount_amount(discount, 500000) == 100000
    assert calculate_discount_amount(discount, 500000, apply_cap=False) == 250000


def test_fixed_discount_never_goes_below_zero():
    q = quote(_discount(DiscountType.FIXED, 800000), 500000)
    assert q.discount_amount == 500000
    assert q.final_price == 0


def test_no_discount_keeps_full_price():
    q = quote(None, 500000)
    assert q.discount_amount == 0
    assert q.final_price == 500000
    assert q.savings == 0
