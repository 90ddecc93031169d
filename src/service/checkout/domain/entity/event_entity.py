from datetime import datetime
from typing import List, Optional

import attrs

from src.platform.exception.exceptions import ValidationError
from src.platform.logging.loguru_io import Logger


@attrs.define
class EventTier:
    """Seat inventory of one tier. Invariant: held + sold <= capacity."""

    tier_name: str
    price: int
    capacity: int
    held: int = 0
    sold: int = 0
    event_id: Optional[int] = None

    @property
    def available(self) -> int:
        return self.capacity - self.held - self.sold


@attrs.define
class Event:
    name: str
    tiers: List[EventTier] = attrs.field(factory=list)
    average_rating: Optional[float] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create(cls, *, name: str, tiers: List[EventTier]) -> 'Event':
        if not name.strip():
            raise ValidationError('Event name is required')
        if not tiers:
            raise ValidationError('An event needs at least one tier')

        names = [tier.tier_name for tier in tiers]
        if len(set(names)) != len(names):
            raise ValidationError('Tier names must be unique within an event')
        for tier in tiers:
            if not tier.tier_name.strip():
                raise ValidationError('Tier name is required')
            if tier.price < 0:
                raise ValidationError(f'Tier {tier.tier_name} price must not be negative')
            if tier.capacity < 0:
                raise ValidationError(f'Tier {tier.tier_name} capacity must not be negative')

        return cls(name=name.strip(), tiers=tiers)

    @property
    def total_seats(self) -> int:
        return sum(tier.capacity for tier in self.tiers)

    @property
    def total_sold(self) -> int:
        return sum(tier.sold for tier in self.tiers)

    def get_tier(self, tier_name: str) -> Optional[EventTier]:
        return next((tier for tier in self.tiers if tier.tier_name == tier_name), None)
