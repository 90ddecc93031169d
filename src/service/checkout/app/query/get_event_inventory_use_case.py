from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.checkout.domain.entity.event_entity import Event


class GetEventInventoryUseCase:
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
    async def get_inventory(self, *, event_id: int) -> Event:
        async with self.uow_factory() as uow:
            event = await uow.inventory_ledger.get_event(event_id=event_id)

        if event is None:
            raise NotFoundError('Event not found')
        return event
