from datetime import datetime
from typing import List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field

from src.service.checkout.domain.entity.ticket_entity import Ticket
from src.service.checkout.domain.entity.transaction_entity import Transaction


class TransactionCreateRequest(BaseModel):
    event_id: int
    tier: str = Field(min_length=1)
    quantity: int = Field(gt=0)
    coupon_code: Optional[str] = None
    promotion_code: Optional[str] = None
    points_to_use: Optional[Union[int, float, str]] = None  # free-form text is clamped, never rejected

    class Config:
        json_schema_extra = {
            'examples': [
                {'event_id': 1, 'tier': 'VIP', 'quantity': 2, 'coupon_code': 'WELCOME10'},
                {'event_id': 1, 'tier': 'Regular', 'quantity': 1, 'points_to_use': '1,000'},
            ]
        }


class PriceBreakdownResponse(BaseModel):
    base_price: int
    coupon_discount: int
    promotion_discount: int
    points_discount: int
    subtotal_before_tax: int
    tax_amount: int
    final_price: int


class TicketResponse(BaseModel):
    id: UUID
    event_id: int
    tier: str
    is_used: bool
    used_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, ticket: Ticket) -> 'TicketResponse':
        return cls(
            id=ticket.id,
            event_id=ticket.event_id,
            tier=ticket.tier_name,
            is_used=ticket.is_used,
            used_at=ticket.used_at,
        )


class TransactionResponse(BaseModel):
    model_config = {
        'json_schema_extra': {
            'example': {
                'id': '01936d8f-5e73-7c4e-a9c5-123456789abc',  # UUID7
                'user_id': 2,
                'event_id': 1,
                'tier': 'VIP',
                'quantity': 2,
                'status': 'pending',
                'breakdown': {
                    'base_price': 200000,
                    'coupon_discount': 20000,
                    'promotion_discount': 0,
                    'points_discount': 0,
                    'subtotal_before_tax': 180000,
                    'tax_amount': 19800,
                    'final_price': 199800,
                },
                'payment_deadline': '2025-01-10T11:30:00Z',
                'tickets': [],
            }
        },
    }

    id: UUID
    user_id: int
    event_id: int
    tier: str
    quantity: int
    status: str
    breakdown: PriceBreakdownResponse
    points_used: int
    coupon_id: Optional[int] = None
    promotion_id: Optional[int] = None
    payment_deadline: datetime
    paid_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    tickets: List[TicketResponse] = []

    @classmethod
    def from_entity(cls, transaction: Transaction) -> 'TransactionResponse':
        breakdown = transaction.breakdown
        return cls(
            id=transaction.id,
            user_id=transaction.user_id,
            event_id=transaction.event_id,
            tier=transaction.tier_name,
            quantity=transaction.quantity,
            status=transaction.status.value,
            breakdown=PriceBreakdownResponse(
                base_price=breakdown.base_price,
                coupon_discount=breakdown.coupon_discount,
                promotion_discount=breakdown.promotion_discount,
                points_discount=breakdown.points_discount,
                subtotal_before_tax=breakdown.subtotal_before_tax,
                tax_amount=breakdown.tax_amount,
                final_price=breakdown.final_price,
            ),
            points_used=transaction.points_used,
            coupon_id=transaction.coupon_id,
            promotion_id=transaction.promotion_id,
            payment_deadline=transaction.payment_deadline,
            paid_at=transaction.paid_at,
            created_at=transaction.created_at,
            tickets=[TicketResponse.from_entity(ticket) for ticket in transaction.tickets],
        )


class SweepResponse(BaseModel):
    expired_count: int
    expired_points_count: int

    class Config:
        json_schema_extra = {'example': {'expired_count': 3, 'expired_points_count': 0}}
