from datetime import datetime
from typing import List
from uuid import UUID

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.database.storage_error import translate_storage_errors
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import as_utc
from src.service.checkout.app.interface.i_transaction_query_repo import ITransactionQueryRepo
from src.service.checkout.domain.entity.ticket_entity import Ticket
from src.service.checkout.domain.entity.transaction_entity import Transaction
from src.service.checkout.domain.enum.transaction_status import TransactionStatus
from src.service.checkout.domain.price_calculation_domain import PriceBreakdown
from src.service.checkout.driven_adapter.model.ticket_model import TicketModel
from src.service.checkout.driven_adapter.model.transaction_model import TransactionModel


def ticket_model_to_entity(db_ticket: TicketModel) -> Ticket:
    return Ticket(
        id=db_ticket.id,
        transaction_id=db_ticket.transaction_id,
        event_id=db_ticket.event_id,
        tier_name=db_ticket.tier_name,
        is_used=db_ticket.is_used,
        created_at=as_utc(db_ticket.created_at),
        used_at=as_utc(db_ticket.used_at),
    )


class TransactionQueryRepoImpl(ITransactionQueryRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _to_entity(db_transaction: TransactionModel) -> Transaction:
        return Transaction(
            id=db_transaction.id,
            user_id=db_transaction.user_id,
            event_id=db_transaction.event_id,
            tier_name=db_transaction.tier_name,
            quantity=db_transaction.quantity,
            reservation_id=db_transaction.reservation_id,
            breakdown=PriceBreakdown(
                base_price=db_transaction.base_price,
                coupon_discount=db_transaction.coupon_discount,
                promotion_discount=db_transaction.promotion_discount,
                points_discount=db_transaction.points_discount,
                subtotal_before_tax=db_transaction.subtotal_before_tax,
                tax_amount=db_transaction.tax_amount,
                final_price=db_transaction.final_price,
            ),
            payment_deadline=as_utc(db_transaction.payment_deadline),
            status=TransactionStatus(db_transaction.status),
            coupon_id=db_transaction.coupon_id,
            promotion_id=db_transaction.promotion_id,
            points_used=db_transaction.points_used,
            tickets=[ticket_model_to_entity(t) for t in db_transaction.tickets],
            paid_at=as_utc(db_transaction.paid_at),
            created_at=as_utc(db_transaction.created_at),
            updated_at=as_utc(db_transaction.updated_at),
        )

    @Logger.io
    async def get_by_id(self, *, transaction_id: UUID) -> Transaction | None:
        with translate_storage_errors('transaction lookup'):
            result = await self.session.execute(
                select(TransactionModel)
                .where(TransactionModel.id == transaction_id)
                .execution_options(populate_existing=True)
            )
            db_transaction = result.scalar_one_or_none()
        return self._to_entity(db_transaction) if db_transaction else None

    @Logger.io
    async def list_overdue_pending_ids(self, *, now: datetime, limit: int) -> List[UUID]:
        with translate_storage_errors('overdue transaction scan'):
            result = await self.session.execute(
                select(TransactionModel.id)
                .where(
                    TransactionModel.status == TransactionStatus.PENDING.value,
                    TransactionModel.payment_deadline < now,
                )
                .order_by(TransactionModel.payment_deadline)
                .limit(limit)
            )
            return list(result.scalars().all())

    @Logger.io
    async def has_paid_transaction(self, *, user_id: int, event_id: int) -> bool:
        with translate_storage_errors('attendance lookup'):
            result = await self.session.execute(
                select(
                    exists().where(
                        TransactionModel.user_id == user_id,
                        TransactionModel.event_id == event_id,
                        TransactionModel.status == TransactionStatus.PAID.value,
                    )
                )
            )
            return bool(result.scalar())
