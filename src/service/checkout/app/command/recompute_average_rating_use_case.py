from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.lock_retry import run_with_lock_retry
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger


class RecomputeAverageRatingUseCase:
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
    async def recompute(self, *, event_id: int) -> Optional[float]:
        return await run_with_lock_retry(
            lambda: self._recompute_once(event_id=event_id), name='recompute_average_rating'
        )

    async def _recompute_once(self, *, event_id: int) -> Optional[float]:
        async with self.uow_factory() as uow:
            if await uow.inventory_ledger.get_event(event_id=event_id) is None:
                raise NotFoundError('Event not found')
            average = await uow.event_rating_repo.recompute_average_rating(event_id=event_id)
            await uow.commit()
        return average
