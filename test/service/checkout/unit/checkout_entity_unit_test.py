"""
Unit tests for checkout domain entities

Test Focus:
1. Transaction state machine: PENDING is the only status with outgoing transitions
2. Coupon / promotion redemption rules
3. Ticket issuance and check-in
4. Event creation validation
"""

from datetime import datetime, timedelta, timezone
from uuid import UUID

import pytest

from src.platform.exception.exceptions import (
    ExpiredCouponError,
    InvalidCouponError,
    InvalidPromotionError,
    InvalidStateTransitionError,
    ValidationError,
)
from src.service.checkout.domain.entity.discount_entity import Coupon, Promotion
from src.service.checkout.domain.entity.event_entity import Event, EventTier
from src.service.checkout.domain.entity.point_transaction_entity import PointTransaction
from src.service.checkout.domain.entity.ticket_entity import Ticket
from src.service.checkout.domain.entity.transaction_entity import Transaction
from src.service.checkout.domain.enum.discount_type import DiscountType
from src.service.checkout.domain.enum.transaction_status import TransactionStatus
from src.service.checkout.domain.price_calculation_domain import PriceBreakdown


NOW = datetime(2025, 1, 10, 10, 30, tzinfo=timezone.utc)


def _breakdown(points: int = 0) -> PriceBreakdown:
    return PriceBreakdown(
        base_price=200000,
        coupon_discount=20000,
        promotion_discount=0,
        points_discount=points,
        subtotal_before_tax=180000 - points,
        tax_amount=0,
        final_price=180000 - points,
    )


def _pending(points: int = 0) -> Transaction:
    return Transaction.create_pending(
        user_id=2,
        event_id=1,
        tier_name='VIP',
        quantity=2,
        reservation_id=UUID('00000000-0000-7000-8000-0000000000aa'),
        breakdown=_breakdown(points),
        coupon_id=7,
        promotion_id=None,
        hold_duration=timedelta(minutes=60),
        now=NOW,
    )


@pytest.mark.unit
class TestTransactionStateMachine:
    def test_create_pending_sets_deadline_and_points(self) -> None:
        transaction = _pending(points=1500)

        assert transaction.status == TransactionStatus.PENDING
        assert transaction.payment_deadline == NOW + timedelta(minutes=60)
        assert transaction.points_used == 1500
        assert transaction.final_price == 178500
        assert transaction.coupon_id == 7
        assert transaction.id.version == 7

    def test_create_pending_rejects_non_positive_hold(self) -> None:
        with pytest.raises(ValidationError):
            Transaction.create_pending(
                user_id=2,
                event_id=1,
                tier_name='VIP',
                quantity=1,
                reservation_id=UUID('00000000-0000-7000-8000-0000000000aa'),
                breakdown=_breakdown(),
                coupon_id=None,
                promotion_id=None,
                hold_duration=timedelta(0),
                now=NOW,
            )

    def test_transitions_return_new_instances(self) -> None:
        """
        Given: A PENDING transaction
        When: Marking it paid
        Then: A PAID copy is returned and the original stays PENDING
        """
        transaction = _pending()

        paid = transaction.mark_paid(now=NOW)

        assert paid.status == TransactionStatus.PAID
        assert paid.paid_at == NOW
        assert transaction.status == TransactionStatus.PENDING
        assert transaction.paid_at is None

    @pytest.mark.parametrize(
        'terminal', [TransactionStatus.PAID, TransactionStatus.EXPIRED, TransactionStatus.CANCELLED]
    )
    def test_terminal_transactions_reject_every_transition(
        self, terminal: TransactionStatus
    ) -> None:
        transaction = _pending()
        transaction.status = terminal

        for transition in (transaction.mark_paid, transaction.expire, transaction.cancel):
            with pytest.raises(InvalidStateTransitionError):
                transition(now=NOW)

    def test_is_overdue_only_for_pending_past_deadline(self) -> None:
        transaction = _pending()
        after_deadline = transaction.payment_deadline + timedelta(seconds=1)

        assert not transaction.is_overdue(now=transaction.payment_deadline)
        assert transaction.is_overdue(now=after_deadline)
        assert not transaction.expire(now=NOW).is_overdue(now=after_deadline)

    def test_terminal_flag_on_status(self) -> None:
        assert not TransactionStatus.PENDING.is_terminal
        assert TransactionStatus.PAID.is_terminal
        assert TransactionStatus.EXPIRED.is_terminal
        assert TransactionStatus.CANCELLED.is_terminal


@pytest.mark.unit
class TestCouponAndPromotion:
    @pytest.fixture
    def coupon(self) -> Coupon:
        return Coupon(
            id=1,
            code='WELCOME10',
            user_id=2,
            discount_value=10,
            discount_type=DiscountType.PERCENTAGE,
            expires_at=NOW + timedelta(days=1),
        )

    @pytest.fixture
    def promotion(self) -> Promotion:
        return Promotion(
            id=1,
            event_id=1,
            code='SPRING',
            discount_value=5000,
            discount_type=DiscountType.FIXED,
            start_date=NOW - timedelta(days=1),
            end_date=NOW + timedelta(days=1),
            usage_limit=10,
            usage_count=3,
        )

    def test_coupon_redeemable_by_owner(self, coupon: Coupon) -> None:
        coupon.ensure_redeemable(user_id=2, now=NOW)

        assert coupon.discount.value == 10
        assert coupon.discount.type == DiscountType.PERCENTAGE

    def test_coupon_of_another_user_is_invalid(self, coupon: Coupon) -> None:
        with pytest.raises(InvalidCouponError):
            coupon.ensure_redeemable(user_id=3, now=NOW)

    def test_used_coupon_is_invalid(self, coupon: Coupon) -> None:
        coupon.is_used = True

        with pytest.raises(InvalidCouponError, match='already been used'):
            coupon.ensure_redeemable(user_id=2, now=NOW)

    def test_expired_coupon(self, coupon: Coupon) -> None:
        with pytest.raises(ExpiredCouponError):
            coupon.ensure_redeemable(user_id=2, now=NOW + timedelta(days=2))

    def test_promotion_redeemable_within_window(self, promotion: Promotion) -> None:
        promotion.ensure_redeemable(event_id=1, now=NOW)

        assert not promotion.is_exhausted

    @pytest.mark.parametrize(
        'change',
        [
            {'is_active': False},
            {'usage_count': 10},
            {'start_date': NOW + timedelta(hours=1)},
            {'end_date': NOW - timedelta(hours=1)},
        ],
    )
    def test_unusable_promotion_is_invalid(self, promotion: Promotion, change: dict) -> None:
        for field, value in change.items():
            setattr(promotion, field, value)

        with pytest.raises(InvalidPromotionError):
            promotion.ensure_redeemable(event_id=1, now=NOW)

    def test_promotion_for_another_event_is_invalid(self, promotion: Promotion) -> None:
        with pytest.raises(InvalidPromotionError):
            promotion.ensure_redeemable(event_id=99, now=NOW)

    def test_promotion_without_limit_is_never_exhausted(self, promotion: Promotion) -> None:
        promotion.usage_limit = None
        promotion.usage_count = 10_000

        assert not promotion.is_exhausted


@pytest.mark.unit
class TestTicket:
    def test_issue_one_ticket_per_seat(self) -> None:
        transaction_id = UUID('00000000-0000-7000-8000-0000000000aa')

        tickets = Ticket.issue_for(
            transaction_id=transaction_id, event_id=1, tier_name='VIP', quantity=3, now=NOW
        )

        assert len(tickets) == 3
        assert len({ticket.id for ticket in tickets}) == 3
        assert all(ticket.transaction_id == transaction_id for ticket in tickets)
        assert all(not ticket.is_used for ticket in tickets)

    def test_check_in_once(self) -> None:
        ticket = Ticket.issue_for(
            transaction_id=UUID('00000000-0000-7000-8000-0000000000aa'),
            event_id=1,
            tier_name='VIP',
            quantity=1,
            now=NOW,
        )[0]

        used = ticket.check_in(now=NOW)

        assert used.is_used
        assert used.used_at == NOW
        with pytest.raises(InvalidStateTransitionError):
            used.check_in(now=NOW)


@pytest.mark.unit
class TestEvent:
    def test_create_event(self) -> None:
        event = Event.create(
            name='  Spring Concert ',
            tiers=[
                EventTier(tier_name='VIP', price=100000, capacity=50),
                EventTier(tier_name='Regular', price=50000, capacity=500),
            ],
        )

        assert event.name == 'Spring Concert'
        assert event.total_seats == 550
        assert event.get_tier('VIP').price == 100000
        assert event.get_tier('Balcony') is None

    @pytest.mark.parametrize(
        'name,tiers',
        [
            ('', [EventTier(tier_name='VIP', price=1, capacity=1)]),
            ('Concert', []),
            (
                'Concert',
                [
                    EventTier(tier_name='VIP', price=1, capacity=1),
                    EventTier(tier_name='VIP', price=2, capacity=2),
                ],
            ),
            ('Concert', [EventTier(tier_name='VIP', price=-1, capacity=1)]),
            ('Concert', [EventTier(tier_name='VIP', price=1, capacity=-1)]),
        ],
    )
    def test_invalid_event_is_rejected(self, name: str, tiers: list) -> None:
        with pytest.raises(ValidationError):
            Event.create(name=name, tiers=tiers)

    def test_tier_availability(self) -> None:
        tier = EventTier(tier_name='VIP', price=1, capacity=10, held=3, sold=4)

        assert tier.available == 3


@pytest.mark.unit
class TestPointTransaction:
    def test_grant_redeemable_until_expiry(self) -> None:
        grant = PointTransaction(
            user_id=2,
            points=1000,
            remaining=400,
            description='Welcome bonus',
            expires_at=NOW + timedelta(days=1),
        )

        assert grant.is_grant
        assert grant.is_redeemable(at=NOW)
        assert not grant.is_redeemable(at=NOW + timedelta(days=1))

    def test_debit_is_never_redeemable(self) -> None:
        debit = PointTransaction(user_id=2, points=-500, description='Redeemed', expires_at=NOW)

        assert not debit.is_grant
        assert not debit.is_redeemable(at=NOW - timedelta(days=1))
