from uuid import UUID

import attrs

from src.service.checkout.domain.enum.reservation_state import ReservationState


@attrs.frozen
class ReservationHandle:
    """Proof of a seat hold; release/commit address the hold by ``id``."""

    id: UUID
    event_id: int
    tier_name: str
    quantity: int
    unit_price: int
    state: ReservationState = ReservationState.HELD
