"""
Unit tests for CreatePendingTransactionUseCase

Test Focus:
1. Orchestration order: reserve -> discounts -> points -> price -> claims -> debit -> insert -> commit
2. Fail Fast: invalid coupon/promotion, lost claims, seat shortage never reach commit
3. Lock contention is retried with a fresh unit of work
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID

import pytest

from src.platform.exception.exceptions import (
    ConcurrencyConflictError,
    InsufficientSeatsError,
    InvalidCouponError,
    InvalidPromotionError,
)
from src.service.checkout.app.command.create_pending_transaction_use_case import (
    CreatePendingTransactionUseCase,
)
from src.service.checkout.app.dto import CreateTransactionRequest
from src.service.checkout.domain.entity.discount_entity import Coupon, Promotion
from src.service.checkout.domain.enum.discount_type import DiscountType
from src.service.checkout.domain.enum.transaction_status import TransactionStatus
from src.service.checkout.domain.value_object.reservation_handle import ReservationHandle


HANDLE = ReservationHandle(
    id=UUID('00000000-0000-7000-8000-0000000000aa'),
    event_id=1,
    tier_name='VIP',
    quantity=2,
    unit_price=100000,
)


@pytest.mark.unit
class TestCreatePendingTransaction:
    @pytest.fixture
    def coupon(self) -> Coupon:
        return Coupon(
            id=7,
            code='WELCOME10',
            user_id=2,
            discount_value=10,
            discount_type=DiscountType.PERCENTAGE,
            expires_at=datetime.now(timezone.utc) + timedelta(days=1),
        )

    @pytest.fixture
    def promotion(self) -> Promotion:
        now = datetime.now(timezone.utc)
        return Promotion(
            id=3,
            event_id=1,
            code='SPRING',
            discount_value=5000,
            discount_type=DiscountType.FIXED,
            start_date=now - timedelta(days=1),
            end_date=now + timedelta(days=1),
        )

    @pytest.fixture
    def use_case(self, mock_uow_factory: MagicMock) -> CreatePendingTransactionUseCase:
        return CreatePendingTransactionUseCase(uow_factory=mock_uow_factory)

    @pytest.mark.asyncio
    async def test_creates_pending_transaction_with_coupon_and_points(
        self, use_case, mock_uow, coupon: Coupon
    ) -> None:
        """
        Given: 2 VIP seats at 100000, a 10% coupon, 5000 points available, '3,000' requested
        When: Creating the pending transaction
        Then:
          - Price: 200000 - 20000 - 3000 = 177000, tax 19470, final 196470
          - Coupon is claimed for this transaction and 3000 points are debited
          - The row is inserted and the unit of work committed
        """
        # Arrange
        mock_uow.inventory_ledger.reserve = AsyncMock(return_value=HANDLE)
        mock_uow.discount_catalog.find_coupon = AsyncMock(return_value=coupon)
        mock_uow.discount_catalog.claim_coupon = AsyncMock(return_value=True)
        mock_uow.loyalty_ledger.available_balance = AsyncMock(return_value=5000)

        # Act
        transaction = await use_case.create_pending(
            request=CreateTransactionRequest(
                user_id=2,
                event_id=1,
                tier_name='VIP',
                quantity=2,
                coupon_code='WELCOME10',
                points_to_use='3,000',
            )
        )

        # Assert
        assert transaction.status == TransactionStatus.PENDING
        assert transaction.reservation_id == HANDLE.id
        assert transaction.breakdown.coupon_discount == 20000
        assert transaction.breakdown.points_discount == 3000
        assert transaction.breakdown.subtotal_before_tax == 177000
        assert transaction.breakdown.tax_amount == 19470
        assert transaction.final_price == 196470
        assert transaction.points_used == 3000
        assert transaction.coupon_id == 7

        mock_uow.inventory_ledger.reserve.assert_awaited_once_with(
            event_id=1, tier_name='VIP', quantity=2
        )
        mock_uow.discount_catalog.claim_coupon.assert_awaited_once_with(
            coupon_id=7, transaction_id=transaction.id
        )
        debit_kwargs = mock_uow.loyalty_ledger.debit.await_args.kwargs
        assert debit_kwargs['amount'] == 3000
        assert debit_kwargs['transaction_id'] == transaction.id
        mock_uow.transaction_command_repo.create.assert_awaited_once_with(transaction=transaction)
        mock_uow.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_points_request_is_clamped_to_balance(self, use_case, mock_uow) -> None:
        mock_uow.inventory_ledger.reserve = AsyncMock(return_value=HANDLE)
        mock_uow.loyalty_ledger.available_balance = AsyncMock(return_value=800)

        transaction = await use_case.create_pending(
            request=CreateTransactionRequest(
                user_id=2, event_id=1, tier_name='VIP', quantity=2, points_to_use=10_000
            )
        )

        assert transaction.points_used == 800
        assert mock_uow.loyalty_ledger.debit.await_args.kwargs['amount'] == 800

    @pytest.mark.asyncio
    async def test_no_points_means_no_debit(self, use_case, mock_uow) -> None:
        mock_uow.inventory_ledger.reserve = AsyncMock(return_value=HANDLE)
        mock_uow.loyalty_ledger.available_balance = AsyncMock(return_value=0)

        transaction = await use_case.create_pending(
            request=CreateTransactionRequest(user_id=2, event_id=1, tier_name='VIP', quantity=2)
        )

        assert transaction.final_price == 222000
        mock_uow.loyalty_ledger.debit.assert_not_awaited()
        mock_uow.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_promotion_is_claimed(self, use_case, mock_uow, promotion: Promotion) -> None:
        mock_uow.inventory_ledger.reserve = AsyncMock(return_value=HANDLE)
        mock_uow.discount_catalog.find_promotion = AsyncMock(return_value=promotion)
        mock_uow.discount_catalog.claim_promotion = AsyncMock(return_value=True)
        mock_uow.loyalty_ledger.available_balance = AsyncMock(return_value=0)

        transaction = await use_case.create_pending(
            request=CreateTransactionRequest(
                user_id=2, event_id=1, tier_name='VIP', quantity=2, promotion_code='SPRING'
            )
        )

        assert transaction.promotion_id == 3
        assert transaction.breakdown.promotion_discount == 5000
        mock_uow.discount_catalog.find_promotion.assert_awaited_once_with(
            event_id=1, code='SPRING'
        )
        mock_uow.discount_catalog.claim_promotion.assert_awaited_once_with(promotion_id=3)

    @pytest.mark.asyncio
    async def test_unknown_coupon_is_rejected(self, use_case, mock_uow) -> None:
        mock_uow.inventory_ledger.reserve = AsyncMock(return_value=HANDLE)
        mock_uow.discount_catalog.find_coupon = AsyncMock(return_value=None)

        with pytest.raises(InvalidCouponError):
            await use_case.create_pending(
                request=CreateTransactionRequest(
                    user_id=2, event_id=1, tier_name='VIP', quantity=2, coupon_code='NOPE'
                )
            )

        mock_uow.transaction_command_repo.create.assert_not_awaited()
        mock_uow.commit.assert_not_awaited()
        mock_uow.rollback.assert_awaited()

    @pytest.mark.asyncio
    async def test_lost_coupon_claim_is_rejected(self, use_case, mock_uow, coupon: Coupon) -> None:
        """
        Given: The coupon looked unused but another checkout claimed it first
        When: Creating the pending transaction
        Then: InvalidCouponError, no points debited, nothing committed
        """
        mock_uow.inventory_ledger.reserve = AsyncMock(return_value=HANDLE)
        mock_uow.discount_catalog.find_coupon = AsyncMock(return_value=coupon)
        mock_uow.discount_catalog.claim_coupon = AsyncMock(return_value=False)
        mock_uow.loyalty_ledger.available_balance = AsyncMock(return_value=5000)

        with pytest.raises(InvalidCouponError, match='already been used'):
            await use_case.create_pending(
                request=CreateTransactionRequest(
                    user_id=2,
                    event_id=1,
                    tier_name='VIP',
                    quantity=2,
                    coupon_code='WELCOME10',
                    points_to_use=1000,
                )
            )

        mock_uow.loyalty_ledger.debit.assert_not_awaited()
        mock_uow.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_exhausted_promotion_claim_is_rejected(
        self, use_case, mock_uow, promotion: Promotion
    ) -> None:
        mock_uow.inventory_ledger.reserve = AsyncMock(return_value=HANDLE)
        mock_uow.discount_catalog.find_promotion = AsyncMock(return_value=promotion)
        mock_uow.discount_catalog.claim_promotion = AsyncMock(return_value=False)
        mock_uow.loyalty_ledger.available_balance = AsyncMock(return_value=0)

        with pytest.raises(InvalidPromotionError):
            await use_case.create_pending(
                request=CreateTransactionRequest(
                    user_id=2, event_id=1, tier_name='VIP', quantity=2, promotion_code='SPRING'
                )
            )

        mock_uow.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_insufficient_seats_propagates(self, use_case, mock_uow) -> None:
        mock_uow.inventory_ledger.reserve = AsyncMock(
            side_effect=InsufficientSeatsError('Only 0 seat(s) left')
        )

        with pytest.raises(InsufficientSeatsError):
            await use_case.create_pending(
                request=CreateTransactionRequest(user_id=2, event_id=1, tier_name='VIP', quantity=2)
            )

        mock_uow.discount_catalog.find_coupon.assert_not_awaited()
        mock_uow.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_lock_conflict_retries_with_fresh_unit_of_work(
        self, use_case, mock_uow, mock_uow_factory: MagicMock
    ) -> None:
        mock_uow.inventory_ledger.reserve = AsyncMock(
            side_effect=[ConcurrencyConflictError('tier row locked'), HANDLE]
        )
        mock_uow.loyalty_ledger.available_balance = AsyncMock(return_value=0)

        transaction = await use_case.create_pending(
            request=CreateTransactionRequest(user_id=2, event_id=1, tier_name='VIP', quantity=2)
        )

        assert transaction.status == TransactionStatus.PENDING
        assert mock_uow_factory.call_count == 2
        mock_uow.commit.assert_awaited_once()
