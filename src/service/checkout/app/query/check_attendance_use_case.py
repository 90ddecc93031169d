from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.logging.loguru_io import Logger


class CheckAttendanceUseCase:
    """A user attended an event iff they hold a PAID transaction for it"""

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
    async def attended(self, *, user_id: int, event_id: int) -> bool:
        async with self.uow_factory() as uow:
            return await uow.transaction_query_repo.has_paid_transaction(
                user_id=user_id, event_id=event_id
            )
