"""
Inventory Ledger Interface

Per (event, tier) seat accounting. Invariant: held + sold <= capacity at every
observable instant, including under concurrent reservations.
"""

from abc import ABC, abstractmethod
from typing import List
from uuid import UUID

from src.service.checkout.domain.entity.event_entity import Event, EventTier
from src.service.checkout.domain.value_object.reservation_handle import ReservationHandle


class IInventoryLedger(ABC):
    @abstractmethod
    async def reserve(self, *, event_id: int, tier_name: str, quantity: int) -> ReservationHandle:
        """
        Atomically hold ``quantity`` seats if the tier still has room.

        Raises:
            ValidationError: unknown event/tier or non-positive quantity
            InsufficientSeatsError: not enough remaining capacity
        """
        pass

    @abstractmethod
    async def release(self, *, reservation_id: UUID) -> bool:
        """
        Give held seats back. Idempotent: releasing a released or committed
        reservation is a no-op.

        Returns:
            True if this call released the seats
        """
        pass

    @abstractmethod
    async def commit(self, *, reservation_id: UUID) -> bool:
        """
        Turn held seats into sold seats. Idempotent.

        Returns:
            True if this call committed the seats
        """
        pass

    @abstractmethod
    async def get_tier(self, *, event_id: int, tier_name: str) -> EventTier | None:
        pass

    @abstractmethod
    async def list_tiers(self, *, event_id: int) -> List[EventTier]:
        pass

    @abstractmethod
    async def create_event(self, *, event: Event) -> Event:
        """Persist an event and its tier inventory rows"""
        pass

    @abstractmethod
    async def get_event(self, *, event_id: int) -> Event | None:
        pass
