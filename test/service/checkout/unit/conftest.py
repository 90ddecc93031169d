"""
Unit test fixtures: a unit of work whose repositories are AsyncMocks.

Use cases only see ``uow_factory()`` -> ``async with`` -> repositories -> ``commit()``,
so the mock mirrors exactly that surface.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID

import pytest

from src.service.checkout.domain.entity.transaction_entity import Transaction
from src.service.checkout.domain.enum.transaction_status import TransactionStatus
from src.service.checkout.domain.price_calculation_domain import PriceBreakdown


class FakeUnitOfWork:
    def __init__(self) -> None:
        self.inventory_ledger = AsyncMock()
        self.loyalty_ledger = AsyncMock()
        self.discount_catalog = AsyncMock()
        self.transaction_command_repo = AsyncMock()
        self.transaction_query_repo = AsyncMock()
        self.ticket_command_repo = AsyncMock()
        self.event_rating_repo = AsyncMock()
        self.commit = AsyncMock()
        self.rollback = AsyncMock()

    async def __aenter__(self) -> 'FakeUnitOfWork':
        return self

    async def __aexit__(self, *args) -> None:
        await self.rollback()


@pytest.fixture
def mock_uow() -> FakeUnitOfWork:
    return FakeUnitOfWork()


@pytest.fixture
def mock_uow_factory(mock_uow: FakeUnitOfWork) -> MagicMock:
    return MagicMock(return_value=mock_uow)


def build_transaction(
    *,
    status: TransactionStatus = TransactionStatus.PENDING,
    user_id: int = 2,
    quantity: int = 2,
    points_used: int = 0,
    coupon_id: Optional[int] = None,
    promotion_id: Optional[int] = None,
    deadline: Optional[datetime] = None,
) -> Transaction:
    now = datetime.now(timezone.utc)
    return Transaction(
        id=UUID('00000000-0000-7000-8000-00000000000a'),
        user_id=user_id,
        event_id=1,
        tier_name='VIP',
        quantity=quantity,
        reservation_id=UUID('00000000-0000-7000-8000-00000000000b'),
        breakdown=PriceBreakdown(
            base_price=200000,
            coupon_discount=0,
            promotion_discount=0,
            points_discount=points_used,
            subtotal_before_tax=200000 - points_used,
            tax_amount=0,
            final_price=200000 - points_used,
        ),
        payment_deadline=deadline or now + timedelta(hours=1),
        status=status,
        coupon_id=coupon_id,
        promotion_id=promotion_id,
        points_used=points_used,
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def make_transaction():
    return build_transaction
