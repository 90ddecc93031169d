from uuid import UUID

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

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
from src.service.checkout.domain.entity.ticket_entity import Ticket
from src.service.checkout.domain.entity.transaction_entity import Transaction
from src.service.checkout.domain.enum.transaction_status import TransactionStatus


class MarkTransactionPaidUseCase:
    """
    Payment confirmation: PENDING -> PAID.

    The status compare-and-set decides races with the sweeper. Confirming an
    already PAID transaction returns it unchanged with its tickets.
    """

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
    async def mark_paid(self, *, transaction_id: UUID) -> Transaction:
        with self.tracer.start_as_current_span(
            'use_case.mark_transaction_paid',
            attributes={'transaction.id': str(transaction_id)},
        ):
            return await run_with_lock_retry(
                lambda: self._mark_paid_once(transaction_id=transaction_id), name='mark_paid'
            )

    async def _mark_paid_once(self, *, transaction_id: UUID) -> Transaction:
        async with self.uow_factory() as uow:
            transaction = await uow.transaction_query_repo.get_by_id(transaction_id=transaction_id)
            if transaction is None:
                raise TransactionNotFoundError(f'Transaction {transaction_id} not found')
            if transaction.status == TransactionStatus.PAID:
                return transaction

            now = utc_now()
            paid = transaction.mark_paid(now=now)

            applied = await uow.transaction_command_repo.apply_transition(
                transaction=paid, from_status=TransactionStatus.PENDING
            )
            if applied is None:
                current = await uow.transaction_query_repo.get_by_id(
                    transaction_id=transaction_id
                )
                if current is not None and current.status == TransactionStatus.PAID:
                    return current
                raise InvalidStateTransitionError(
                    f'Transaction {transaction_id} is no longer pending'
                )

            await uow.inventory_ledger.commit(reservation_id=paid.reservation_id)
            tickets = Ticket.issue_for(
                transaction_id=paid.id,
                event_id=paid.event_id,
                tier_name=paid.tier_name,
                quantity=paid.quantity,
                now=now,
            )
            await uow.ticket_command_repo.create_many(tickets=tickets)
            await uow.commit()

        metrics.record_payment(event_id=paid.event_id, amount=paid.final_price)
        Logger.base.info(
            f'💰 [PAY] transaction={paid.id} issued {len(tickets)} ticket(s) amount={paid.final_price}'
        )
        return attrs.evolve(paid, tickets=tickets)
