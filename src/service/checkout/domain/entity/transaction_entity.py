from datetime import datetime, timedelta
from typing import List, Optional
from uuid import UUID

import attrs
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import InvalidStateTransitionError, ValidationError
from src.platform.logging.loguru_io import Logger
from src.service.checkout.domain.entity.ticket_entity import Ticket
from src.service.checkout.domain.enum.transaction_status import TransactionStatus
from src.service.checkout.domain.price_calculation_domain import PriceBreakdown


@attrs.define
class Transaction:
    """
    A purchase attempt.

    PENDING is the only non-terminal status; PAID, EXPIRED and CANCELLED are final.
    Transitions return a new instance (attrs.evolve) and never mutate in place.
    """

    id: UUID
    user_id: int
    event_id: int
    tier_name: str
    quantity: int
    reservation_id: UUID
    breakdown: PriceBreakdown
    payment_deadline: datetime
    status: TransactionStatus = TransactionStatus.PENDING
    coupon_id: Optional[int] = None
    promotion_id: Optional[int] = None
    points_used: int = 0
    tickets: List[Ticket] = attrs.field(factory=list)
    paid_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create_pending(
        cls,
        *,
        user_id: int,
        event_id: int,
        tier_name: str,
        quantity: int,
        reservation_id: UUID,
        breakdown: PriceBreakdown,
        coupon_id: Optional[int],
        promotion_id: Optional[int],
        hold_duration: timedelta,
        now: datetime,
    ) -> 'Transaction':
        if quantity <= 0:
            raise ValidationError('Quantity must be a positive integer')
        if hold_duration <= timedelta(0):
            raise ValidationError('Hold duration must be positive')

        return cls(
            id=uuid7(),
            user_id=user_id,
            event_id=event_id,
            tier_name=tier_name,
            quantity=quantity,
            reservation_id=reservation_id,
            breakdown=breakdown,
            payment_deadline=now + hold_duration,
            status=TransactionStatus.PENDING,
            coupon_id=coupon_id,
            promotion_id=promotion_id,
            points_used=breakdown.points_discount,
            created_at=now,
            updated_at=now,
        )

    @property
    def final_price(self) -> int:
        return self.breakdown.final_price

    def is_overdue(self, *, now: datetime) -> bool:
        return self.status == TransactionStatus.PENDING and self.payment_deadline < now

    def _ensure_pending(self, target: TransactionStatus) -> None:
        if self.status != TransactionStatus.PENDING:
            raise InvalidStateTransitionError(
                f'Cannot move transaction {self.id} from {self.status} to {target}'
            )

    def mark_paid(self, *, now: datetime) -> 'Transaction':
        self._ensure_pending(TransactionStatus.PAID)
        return attrs.evolve(self, status=TransactionStatus.PAID, paid_at=now, updated_at=now)

    def expire(self, *, now: datetime) -> 'Transaction':
        self._ensure_pending(TransactionStatus.EXPIRED)
        return attrs.evolve(self, status=TransactionStatus.EXPIRED, updated_at=now)

    def cancel(self, *, now: datetime) -> 'Transaction':
        self._ensure_pending(TransactionStatus.CANCELLED)
        return attrs.evolve(self, status=TransactionStatus.CANCELLED, updated_at=now)
