from sqlalchemy import update as sql_update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.database.storage_error import translate_storage_errors
from src.platform.logging.loguru_io import Logger
from src.service.checkout.app.interface.i_transaction_command_repo import (
    ITransactionCommandRepo,
)
from src.service.checkout.domain.entity.transaction_entity import Transaction
from src.service.checkout.domain.enum.transaction_status import TransactionStatus
from src.service.checkout.driven_adapter.model.transaction_model import TransactionModel


class TransactionCommandRepoImpl(ITransactionCommandRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @Logger.io
    async def create(self, *, transaction: Transaction) -> Transaction:
        breakdown = transaction.breakdown
        with translate_storage_errors('transaction insert'):
            self.session.add(
                TransactionModel(
                    id=transaction.id,
                    user_id=transaction.user_id,
                    event_id=transaction.event_id,
                    tier_name=transaction.tier_name,
                    quantity=transaction.quantity,
                    status=transaction.status.value,
                    payment_deadline=transaction.payment_deadline,
                    reservation_id=transaction.reservation_id,
                    coupon_id=transaction.coupon_id,
                    promotion_id=transaction.promotion_id,
                    points_used=transaction.points_used,
                    base_price=breakdown.base_price,
                    coupon_discount=breakdown.coupon_discount,
                    promotion_discount=breakdown.promotion_discount,
                    points_discount=breakdown.points_discount,
                    subtotal_before_tax=breakdown.subtotal_before_tax,
                    tax_amount=breakdown.tax_amount,
                    final_price=breakdown.final_price,
                    created_at=transaction.created_at,
                    updated_at=transaction.updated_at,
                )
            )
            await self.session.flush()
        return transaction

    @Logger.io
    async def apply_transition(
        self, *, transaction: Transaction, from_status: TransactionStatus
    ) -> Transaction | None:
        with translate_storage_errors('transaction status change'):
            stmt = (
                sql_update(TransactionModel)
                .where(
                    TransactionModel.id == transaction.id,
                    TransactionModel.status == from_status.value,
                )
                .values(
                    status=transaction.status.value,
                    paid_at=transaction.paid_at,
                    updated_at=transaction.updated_at,
                )
                .returning(TransactionModel.id)
                .execution_options(synchronize_session=False)
            )
            updated_id = (await self.session.execute(stmt)).scalar_one_or_none()

        if updated_id is None:
            return None
        return transaction
