"""
Create Pending Transaction Use Case

Flow (one unit of work, all-or-nothing):
1. Reserve seats on the tier (first write; takes the tier row lock)
2. Look up coupon / promotion and check they are redeemable
3. Clamp the requested points against the available balance
4. Price the purchase
5. Claim coupon and promotion, debit points
6. Insert the PENDING transaction and commit

Any failure before commit rolls back the hold, the claims and the debit.
"""

import time
from datetime import timedelta

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.database.lock_retry import run_with_lock_retry
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import (
    InsufficientSeatsError,
    InvalidCouponError,
    InvalidPromotionError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.checkout_metrics import metrics
from src.platform.types.utc_datetime import utc_now
from src.service.checkout.app.dto import CreateTransactionRequest
from src.service.checkout.domain.entity.discount_entity import Coupon, Promotion
from src.service.checkout.domain.entity.transaction_entity import Transaction
from src.service.checkout.domain.price_calculation_domain import (
    calculate_price_breakdown,
    validate_points_input,
)


class CreatePendingTransactionUseCase:
    def __init__(self, *, uow_factory: UnitOfWorkFactory) -> None:
        self.uow_factory = uow_factory
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.unit_of_work.provider]),
    ):
        return cls(uow_factory=uow_factory)

    @Logger.io
    async def create_pending(self, *, request: CreateTransactionRequest) -> Transaction:
        with self.tracer.start_as_current_span(
            'use_case.create_pending_transaction',
            attributes={
                'user.id': request.user_id,
                'event.id': request.event_id,
                'tier.name': request.tier_name,
                'seat.quantity': request.quantity,
            },
        ):
            started = time.perf_counter()
            try:
                transaction = await run_with_lock_retry(
                    lambda: self._create_once(request=request), name='create_pending'
                )
            except InsufficientSeatsError:
                metrics.record_seat_reservation(
                    event_id=request.event_id,
                    tier=request.tier_name,
                    result='insufficient',
                    duration=time.perf_counter() - started,
                )
                raise

            metrics.record_seat_reservation(
                event_id=request.event_id,
                tier=request.tier_name,
                result='success',
                duration=time.perf_counter() - started,
            )
            metrics.record_transition(to_status='pending')
            Logger.base.info(
                f'🧾 [PENDING] transaction={transaction.id} user={request.user_id} '
                f'final_price={transaction.final_price} deadline={transaction.payment_deadline.isoformat()}'
            )
            return transaction

    async def _create_once(self, *, request: CreateTransactionRequest) -> Transaction:
        async with self.uow_factory() as uow:
            now = utc_now()

            handle = await uow.inventory_ledger.reserve(
                event_id=request.event_id,
                tier_name=request.tier_name,
                quantity=request.quantity,
            )

            coupon: Coupon | None = None
            if request.coupon_code:
                coupon = await uow.discount_catalog.find_coupon(code=request.coupon_code)
                if coupon is None:
                    raise InvalidCouponError('Invalid coupon code')
                coupon.ensure_redeemable(user_id=request.user_id, now=now)

            promotion: Promotion | None = None
            if request.promotion_code:
                promotion = await uow.discount_catalog.find_promotion(
                    event_id=request.event_id, code=request.promotion_code
                )
                if promotion is None:
                    raise InvalidPromotionError('Invalid or expired promotional code')
                promotion.ensure_redeemable(event_id=request.event_id, now=now)

            available_points = await uow.loyalty_ledger.available_balance(
                user_id=request.user_id, at=now
            )
            points_to_use = validate_points_input(request.points_to_use, available_points)

            breakdown = calculate_price_breakdown(
                unit_price=handle.unit_price,
                quantity=handle.quantity,
                coupon=coupon.discount if coupon else None,
                promotion=promotion.discount if promotion else None,
                points_to_use=points_to_use,
                tax_rate=settings.TAX_RATE,
            )

            transaction = Transaction.create_pending(
                user_id=request.user_id,
                event_id=request.event_id,
                tier_name=request.tier_name,
                quantity=handle.quantity,
                reservation_id=handle.id,
                breakdown=breakdown,
                coupon_id=coupon.id if coupon else None,
                promotion_id=promotion.id if promotion else None,
                hold_duration=timedelta(minutes=settings.HOLD_DURATION_MINUTES),
                now=now,
            )

            if coupon and not await uow.discount_catalog.claim_coupon(
                coupon_id=coupon.id, transaction_id=transaction.id
            ):
                raise InvalidCouponError('Coupon has already been used')

            if promotion and not await uow.discount_catalog.claim_promotion(
                promotion_id=promotion.id
            ):
                raise InvalidPromotionError('Invalid or expired promotional code')

            if transaction.points_used > 0:
                await uow.loyalty_ledger.debit(
                    user_id=request.user_id,
                    amount=transaction.points_used,
                    description=f'Redeemed for transaction {transaction.id}',
                    at=now,
                    transaction_id=transaction.id,
                )

            await uow.transaction_command_repo.create(transaction=transaction)
            await uow.commit()

        return transaction
