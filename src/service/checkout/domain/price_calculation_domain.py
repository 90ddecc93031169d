"""
Price calculation pipeline

Pure and synchronous. The step order is part of the contract:

1. base_price = unit_price * quantity
2. coupon_discount, capped at base_price
3. promotion_discount, capped at base_price (the ORIGINAL base, not the remainder)
4. price_after_coupon_and_promo = max(0, base - coupon - promotion)
5. points_discount = min(max(0, points_to_use), price_after_coupon_and_promo)
6. subtotal_before_tax = max(0, base - coupon - promotion - points)
7. tax_amount = subtotal_before_tax * tax_rate, rounded half-up to an integer
8. final_price = subtotal_before_tax + tax_amount

Coupon and promotion are each capped against the original base price, so their
sum may exceed it; step 4 clamps. This stacking rule is kept as-is.

All money amounts are integers in the smallest currency unit.
"""

from decimal import ROUND_HALF_UP, Decimal
import math
import re
from typing import Optional

import attrs

from src.platform.exception.exceptions import ValidationError
from src.service.checkout.domain.enum.discount_type import DiscountType


@attrs.frozen
class DiscountInfo:
    value: int
    type: DiscountType


@attrs.frozen
class PriceBreakdown:
    base_price: int
    coupon_discount: int
    promotion_discount: int
    points_discount: int
    subtotal_before_tax: int
    tax_amount: int
    final_price: int

    @property
    def price_after_coupon_and_promo(self) -> int:
        return max(0, self.base_price - self.coupon_discount - self.promotion_discount)


def calculate_discount_amount(base_price: int, discount: Optional[DiscountInfo]) -> int:
    if discount is None:
        return 0
    if discount.type == DiscountType.PERCENTAGE:
        amount = (base_price * discount.value) // 100  # floor, never over-credit
    else:
        amount = discount.value
    return max(0, min(amount, base_price))


def _as_decimal(value: Decimal | float | int) -> Decimal:
    # str() keeps 0.11 as 0.11 instead of its binary expansion
    return value if isinstance(value, Decimal) else Decimal(str(value))


def calculate_tax(subtotal: int, tax_rate: Decimal | float | int) -> int:
    """Round half-up: 0.5 -> 1, 2.5 -> 3."""
    tax = Decimal(subtotal) * _as_decimal(tax_rate)
    return int(tax.quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def calculate_price_breakdown(
    *,
    unit_price: int,
    quantity: int,
    coupon: Optional[DiscountInfo] = None,
    promotion: Optional[DiscountInfo] = None,
    points_to_use: int = 0,
    tax_rate: Decimal | float | int,
) -> PriceBreakdown:
    tax_rate = _as_decimal(tax_rate)
    if unit_price < 0:
        raise ValidationError('Unit price must not be negative')
    if quantity <= 0:
        raise ValidationError('Quantity must be a positive integer')
    if tax_rate < 0:
        raise ValidationError('Tax rate must not be negative')

    base_price = unit_price * quantity
    coupon_discount = calculate_discount_amount(base_price, coupon)
    promotion_discount = calculate_discount_amount(base_price, promotion)

    price_after_coupon_and_promo = max(0, base_price - coupon_discount - promotion_discount)
    points_discount = min(max(0, points_to_use), price_after_coupon_and_promo)

    subtotal_before_tax = max(
        0, base_price - coupon_discount - promotion_discount - points_discount
    )
    tax_amount = calculate_tax(subtotal_before_tax, tax_rate)

    return PriceBreakdown(
        base_price=base_price,
        coupon_discount=coupon_discount,
        promotion_discount=promotion_discount,
        points_discount=points_discount,
        subtotal_before_tax=subtotal_before_tax,
        tax_amount=tax_amount,
        final_price=subtotal_before_tax + tax_amount,
    )


_NON_DIGIT = re.compile(r'\D')


def validate_points_input(raw: str | int | float | None, available: int) -> int:
    """
    Clamp a user-supplied points amount against the available balance.

    Non-digit characters are stripped ("1,500 pts" -> 1500). A leading minus sign
    makes the input negative, which yields 0. Never raises.
    """
    if raw is None or isinstance(raw, bool):
        return 0
    if isinstance(raw, (int, float)):
        if (isinstance(raw, float) and not math.isfinite(raw)) or raw < 0:
            return 0
        value = int(raw)
    else:
        text = str(raw).strip()
        if text.startswith('-'):
            return 0
        digits = _NON_DIGIT.sub('', text)
        if not digits:
            return 0
        # Anything longer than a 64-bit amount is simply "more than available"
        value = int(digits) if len(digits) <= 18 else available
    return max(0, min(value, max(0, available)))
