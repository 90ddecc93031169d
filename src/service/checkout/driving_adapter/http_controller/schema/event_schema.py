from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from src.service.checkout.domain.entity.event_entity import Event


class TierCreateRequest(BaseModel):
    tier: str = Field(min_length=1, max_length=100)
    price: int = Field(ge=0)
    capacity: int = Field(ge=0)


class EventCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    tiers: List[TierCreateRequest] = Field(min_length=1)

    class Config:
        json_schema_extra = {
            'example': {
                'name': 'Spring Concert',
                'tiers': [
                    {'tier': 'VIP', 'price': 100000, 'capacity': 50},
                    {'tier': 'Regular', 'price': 50000, 'capacity': 500},
                ],
            }
        }


class TierInventoryResponse(BaseModel):
    tier: str
    price: int
    capacity: int
    held: int
    sold: int
    available: int


class EventInventoryResponse(BaseModel):
    id: int
    name: str
    average_rating: Optional[float] = None
    created_at: Optional[datetime] = None
    total_seats: int
    total_sold: int
    tiers: List[TierInventoryResponse]

    @classmethod
    def from_entity(cls, event: Event) -> 'EventInventoryResponse':
        return cls(
            id=event.id or 0,
            name=event.name,
            average_rating=event.average_rating,
            created_at=event.created_at,
            total_seats=event.total_seats,
            total_sold=event.total_sold,
            tiers=[
                TierInventoryResponse(
                    tier=tier.tier_name,
                    price=tier.price,
                    capacity=tier.capacity,
                    held=tier.held,
                    sold=tier.sold,
                    available=tier.available,
                )
                for tier in event.tiers
            ],
        )


class AttendanceResponse(BaseModel):
    user_id: int
    event_id: int
    attended: bool


class RatingResponse(BaseModel):
    event_id: int
    average_rating: Optional[float] = None
