from typing import List
from uuid import UUID

from sqlalchemy import select, update as sql_update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.database.storage_error import translate_storage_errors
from src.platform.logging.loguru_io import Logger
from src.service.checkout.app.interface.i_ticket_command_repo import ITicketCommandRepo
from src.service.checkout.domain.entity.ticket_entity import Ticket
from src.service.checkout.driven_adapter.model.ticket_model import TicketModel
from src.service.checkout.driven_adapter.repo.transaction_query_repo_impl import (
    ticket_model_to_entity,
)


class TicketCommandRepoImpl(ITicketCommandRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @Logger.io
    async def create_many(self, *, tickets: List[Ticket]) -> List[Ticket]:
        with translate_storage_errors('ticket issue'):
            self.session.add_all(
                [
                    TicketModel(
                        id=ticket.id,
                        transaction_id=ticket.transaction_id,
                        event_id=ticket.event_id,
                        tier_name=ticket.tier_name,
                        is_used=ticket.is_used,
                        used_at=ticket.used_at,
                        created_at=ticket.created_at,
                    )
                    for ticket in tickets
                ]
            )
            await self.session.flush()
        return tickets

    @Logger.io
    async def get_by_id(self, *, ticket_id: UUID) -> Ticket | None:
        with translate_storage_errors('ticket lookup'):
            result = await self.session.execute(
                select(TicketModel)
                .where(TicketModel.id == ticket_id)
                .execution_options(populate_existing=True)
            )
            db_ticket = result.scalar_one_or_none()
        return ticket_model_to_entity(db_ticket) if db_ticket else None

    @Logger.io
    async def mark_used(self, *, ticket: Ticket) -> Ticket | None:
        with translate_storage_errors('ticket check-in'):
            result = await self.session.execute(
                sql_update(TicketModel)
                .where(TicketModel.id == ticket.id, TicketModel.is_used.is_(False))
                .values(is_used=True, used_at=ticket.used_at)
                .returning(TicketModel.id)
                .execution_options(synchronize_session=False)
            )
            if result.scalar_one_or_none() is None:
                return None
        return ticket
