from datetime import datetime
from typing import Optional
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.lock_retry import run_with_lock_retry
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import TransactionNotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.checkout_metrics import metrics
from src.platform.types.utc_datetime import utc_now
from src.service.checkout.app.command.reclaim_holdings import reclaim_holdings
from src.service.checkout.domain.entity.transaction_entity import Transaction
from src.service.checkout.domain.enum.transaction_status import TransactionStatus


class ExpireTransactionUseCase:
    def __init__(self, *, uow_factory: UnitOfWorkFactory) -> None:
        self.uow_factory = uow_factory

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.unit_of_work.provider]),
    ):
        return cls(uow_factory=uow_factory)

    @Logger.io
    async def expire(
        self, *, transaction_id: UUID, now: Optional[datetime] = None
    ) -> Transaction | None:
        """
        PENDING -> EXPIRED, then release seats, refund points and restore
        coupon/promotion usage.

        Returns None when the transaction is already terminal or another worker
        won the status change.
        """
        expired_at = now or utc_now()
        return await run_with_lock_retry(
            lambda: self._expire_once(transaction_id=transaction_id, now=expired_at),
            name='expire',
        )

    async def _expire_once(self, *, transaction_id: UUID, now: datetime) -> Transaction | None:
        async with self.uow_factory() as uow:
            transaction = await uow.transaction_query_repo.get_by_id(transaction_id=transaction_id)
            if transaction is None:
                raise TransactionNotFoundError(f'Transaction {transaction_id} not found')
            if transaction.status.is_terminal:
                return None

            expired = transaction.expire(now=now)
            applied = await uow.transaction_command_repo.apply_transition(
                transaction=expired, from_status=TransactionStatus.PENDING
            )
            if applied is None:
                return None

            await reclaim_holdings(uow=uow, transaction=expired, now=now)
            await uow.commit()

        metrics.record_transition(to_status='expired')
        Logger.base.info(
            f'⌛ [EXPIRE] transaction={expired.id} released {expired.quantity} seat(s) '
            f'refunded {expired.points_used} point(s)'
        )
        return expired
