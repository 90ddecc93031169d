"""Create-pending transaction request"""

from typing import Any, Optional

import attrs


@attrs.define
class CreateTransactionRequest:
    user_id: int
    event_id: int
    tier_name: str
    quantity: int
    coupon_code: Optional[str] = None
    promotion_code: Optional[str] = None
    points_to_use: Any = 0  # int or free-form text, clamped against the balance
