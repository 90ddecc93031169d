from datetime import datetime
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.lock_retry import run_with_lock_retry
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import (
    InvalidStateTransitionError,
    TransactionNotFoundError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.checkout_metrics import metrics
from src.platform.types.utc_datetime import utc_now
from src.service.checkout.app.command.reclaim_holdings import reclaim_holdings
from src.service.checkout.domain.entity.transaction_entity import Transaction
from src.service.checkout.domain.enum.transaction_status import TransactionStatus


class CancelTransactionUseCase:
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
    async def cancel(self, *, transaction_id: UUID, user_id: int) -> Transaction:
        return await run_with_lock_retry(
            lambda: self._cancel_once(transaction_id=transaction_id, user_id=user_id, now=utc_now()),
            name='cancel',
        )

    async def _cancel_once(self, *, transaction_id: UUID, user_id: int, now: datetime) -> Transaction:
        async with self.uow_factory() as uow:
            transaction = await uow.transaction_query_repo.get_by_id(transaction_id=transaction_id)
            # Someone else's transaction looks the same as a missing one
            if transaction is None or transaction.user_id != user_id:
                raise TransactionNotFoundError(f'Transaction {transaction_id} not found')

            cancelled = transaction.cancel(now=now)
            applied = await uow.transaction_command_repo.apply_transition(
                transaction=cancelled, from_status=TransactionStatus.PENDING
            )
            if applied is None:
                raise InvalidStateTransitionError(
                    f'Transaction {transaction_id} is no longer pending'
                )

            await reclaim_holdings(uow=uow, transaction=cancelled, now=now)
            await uow.commit()

        metrics.record_transition(to_status='cancelled')
        Logger.base.info(f'🚫 [CANCEL] transaction={cancelled.id} user={user_id}')
        return cancelled
