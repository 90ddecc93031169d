from abc import ABC, abstractmethod
from typing import List
from uuid import UUID

from src.service.checkout.domain.entity.ticket_entity import Ticket


class ITicketCommandRepo(ABC):
    @abstractmethod
    async def create_many(self, *, tickets: List[Ticket]) -> List[Ticket]:
        pass

    @abstractmethod
    async def get_by_id(self, *, ticket_id: UUID) -> Ticket | None:
        pass

    @abstractmethod
    async def mark_used(self, *, ticket: Ticket) -> Ticket | None:
        """Compare-and-set unused -> used; None if it was already used"""
        pass
