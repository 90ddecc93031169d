"""Coupon and promotion entities with their redemption rules"""

from datetime import datetime
from typing import Optional

import attrs

from src.platform.exception.exceptions import (
    ExpiredCouponError,
    InvalidCouponError,
    InvalidPromotionError,
)
from src.service.checkout.domain.enum.discount_type import DiscountType
from src.service.checkout.domain.price_calculation_domain import DiscountInfo


@attrs.define
class Coupon:
    id: int
    code: str
    user_id: int
    discount_value: int
    discount_type: DiscountType
    expires_at: datetime
    is_used: bool = False

    @property
    def discount(self) -> DiscountInfo:
        return DiscountInfo(value=self.discount_value, type=self.discount_type)

    def ensure_redeemable(self, *, user_id: int, now: datetime) -> None:
        if self.user_id != user_id:
            raise InvalidCouponError('Invalid coupon code')
        if self.is_used:
            raise InvalidCouponError('Coupon has already been used')
        if self.expires_at <= now:
            raise ExpiredCouponError('Coupon has expired')


@attrs.define
class Promotion:
    id: int
    event_id: int
    code: str
    discount_value: int
    discount_type: DiscountType
    start_date: datetime
    end_date: datetime
    is_active: bool = True
    usage_limit: Optional[int] = None
    usage_count: int = 0

    @property
    def discount(self) -> DiscountInfo:
        return DiscountInfo(value=self.discount_value, type=self.discount_type)

    @property
    def is_exhausted(self) -> bool:
        return self.usage_limit is not None and self.usage_count >= self.usage_limit

    def ensure_redeemable(self, *, event_id: int, now: datetime) -> None:
        if (
            self.event_id != event_id
            or not self.is_active
            or not (self.start_date <= now <= self.end_date)
            or self.is_exhausted
        ):
            raise InvalidPromotionError('Invalid or expired promotional code')
