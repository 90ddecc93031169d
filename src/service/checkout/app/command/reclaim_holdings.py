from datetime import datetime, timedelta

from src.platform.config.core_setting import settings
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.service.checkout.domain.entity.transaction_entity import Transaction


async def reclaim_holdings(
    *, uow: AbstractUnitOfWork, transaction: Transaction, now: datetime
) -> None:
    """
    Give back what a PENDING transaction was holding: seats, debited points,
    coupon and promotion usage. Runs inside the caller's unit of work right after
    the status compare-and-set, so it happens at most once per transaction.
    """
    await uow.inventory_ledger.release(reservation_id=transaction.reservation_id)

    if transaction.points_used > 0:
        await uow.loyalty_ledger.credit(
            user_id=transaction.user_id,
            amount=transaction.points_used,
            description=f'Refund for transaction {transaction.id} ({transaction.status})',
            expires_at=now + timedelta(days=settings.POINT_REFUND_EXPIRY_DAYS),
            transaction_id=transaction.id,
        )

    if transaction.coupon_id is not None:
        await uow.discount_catalog.restore_coupon(coupon_id=transaction.coupon_id)

    if transaction.promotion_id is not None:
        await uow.discount_catalog.restore_promotion(promotion_id=transaction.promotion_id)
