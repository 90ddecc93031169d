from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.lock_retry import run_with_lock_retry
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import InvalidStateTransitionError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import utc_now
from src.service.checkout.domain.entity.ticket_entity import Ticket


class CheckInTicketUseCase:
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
    async def check_in(self, *, ticket_id: UUID) -> Ticket:
        used = await run_with_lock_retry(
            lambda: self._check_in_once(ticket_id=ticket_id), name='check_in_ticket'
        )
        Logger.base.info(f'🚪 [CHECK-IN] ticket={ticket_id} event={used.event_id}')
        return used

    async def _check_in_once(self, *, ticket_id: UUID) -> Ticket:
        async with self.uow_factory() as uow:
            ticket = await uow.ticket_command_repo.get_by_id(ticket_id=ticket_id)
            if ticket is None:
                raise NotFoundError('Ticket not found')

            used = ticket.check_in(now=utc_now())
            if await uow.ticket_command_repo.mark_used(ticket=used) is None:
                raise InvalidStateTransitionError(f'Ticket {ticket_id} has already been used')
            await uow.commit()
        return used
