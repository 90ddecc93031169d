from typing import List

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.lock_retry import run_with_lock_retry
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.logging.loguru_io import Logger
from src.service.checkout.domain.entity.event_entity import Event, EventTier


class CreateEventUseCase:
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
    async def create_event(self, *, name: str, tiers: List[EventTier]) -> Event:
        event = Event.create(name=name, tiers=tiers)
        created = await run_with_lock_retry(
            lambda: self._create_once(event=event), name='create_event'
        )

        Logger.base.info(
            f'🎫 [EVENT] Created event {created.id} with {len(created.tiers)} tier(s), '
            f'{created.total_seats} seat(s)'
        )
        return created

    async def _create_once(self, *, event: Event) -> Event:
        async with self.uow_factory() as uow:
            created = await uow.inventory_ledger.create_event(event=event)
            await uow.commit()
        return created
