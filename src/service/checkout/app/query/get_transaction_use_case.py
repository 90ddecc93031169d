from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import TransactionNotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.checkout.domain.entity.transaction_entity import Transaction
from src.service.checkout.domain.value_object.current_user import CurrentUser


class GetTransactionUseCase:
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
    async def get_transaction(self, *, transaction_id: UUID, requester: CurrentUser) -> Transaction:
        """Transaction with its tickets; visible to its owner and to admins"""
        async with self.uow_factory() as uow:
            transaction = await uow.transaction_query_repo.get_by_id(transaction_id=transaction_id)

        if transaction is None or not requester.can_access_user(transaction.user_id):
            raise TransactionNotFoundError(f'Transaction {transaction_id} not found')
        return transaction
