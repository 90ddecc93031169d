from abc import ABC, abstractmethod

from src.service.checkout.domain.entity.transaction_entity import Transaction
from src.service.checkout.domain.enum.transaction_status import TransactionStatus


class ITransactionCommandRepo(ABC):
    @abstractmethod
    async def create(self, *, transaction: Transaction) -> Transaction:
        pass

    @abstractmethod
    async def apply_transition(
        self, *, transaction: Transaction, from_status: TransactionStatus
    ) -> Transaction | None:
        """
        Compare-and-set the status: persist ``transaction.status`` only if the
        stored status is still ``from_status``.

        Returns:
            The updated transaction, or None when another writer got there first
        """
        pass
