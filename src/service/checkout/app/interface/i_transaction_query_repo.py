from abc import ABC, abstractmethod
from datetime import datetime
from typing import List
from uuid import UUID

from src.service.checkout.domain.entity.transaction_entity import Transaction


class ITransactionQueryRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, transaction_id: UUID) -> Transaction | None:
        """Transaction with its tickets, or None"""
        pass

    @abstractmethod
    async def list_overdue_pending_ids(self, *, now: datetime, limit: int) -> List[UUID]:
        """Ids of PENDING transactions whose payment deadline is strictly before ``now``"""
        pass

    @abstractmethod
    async def has_paid_transaction(self, *, user_id: int, event_id: int) -> bool:
        pass
