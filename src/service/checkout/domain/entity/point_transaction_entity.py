from datetime import datetime
from typing import Optional
from uuid import UUID

import attrs


@attrs.define
class PointTransaction:
    """
    Loyalty ledger row.

    Grants have points > 0 and track how much of them is still redeemable in
    ``remaining``. Debits have points < 0 and remaining == 0.
    """

    user_id: int
    points: int
    description: str
    expires_at: datetime
    remaining: int = 0
    is_expired: bool = False
    transaction_id: Optional[UUID] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def is_grant(self) -> bool:
        return self.points > 0

    def is_redeemable(self, *, at: datetime) -> bool:
        return self.is_grant and not self.is_expired and self.expires_at > at and self.remaining > 0
