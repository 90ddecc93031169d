from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from src.service.checkout.domain.entity.point_transaction_entity import PointTransaction


class PointGrantRequest(BaseModel):
    points: int
    description: str = Field(min_length=1, max_length=255)
    expires_in_days: Optional[int] = Field(default=None, gt=0)

    class Config:
        json_schema_extra = {
            'examples': [
                {'points': 5000, 'description': 'Welcome bonus'},
                {'points': -1000, 'description': 'Manual correction', 'expires_in_days': 30},
            ]
        }

    @field_validator('points')
    @classmethod
    def validate_points(cls, v: int) -> int:
        if v == 0:
            raise ValueError('points must be a non-zero integer')
        return v

    @field_validator('description')
    @classmethod
    def validate_description(cls, v: str) -> str:
        if not v.strip():
            raise ValueError('description must not be blank')
        return v.strip()


class PointTransactionResponse(BaseModel):
    id: Optional[int] = None
    user_id: int
    points: int
    remaining: int
    description: str
    expires_at: datetime
    is_expired: bool
    transaction_id: Optional[UUID] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, entry: PointTransaction) -> 'PointTransactionResponse':
        return cls(
            id=entry.id,
            user_id=entry.user_id,
            points=entry.points,
            remaining=entry.remaining,
            description=entry.description,
            expires_at=entry.expires_at,
            is_expired=entry.is_expired,
            transaction_id=entry.transaction_id,
            created_at=entry.created_at,
        )


class PointBalanceResponse(BaseModel):
    user_id: int
    balance: int
    as_of: datetime

    class Config:
        json_schema_extra = {
            'example': {'user_id': 2, 'balance': 12000, 'as_of': '2025-01-10T10:30:00Z'}
        }
