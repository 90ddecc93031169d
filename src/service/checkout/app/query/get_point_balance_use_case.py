from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import utc_now
from src.service.checkout.app.dto import PointBalance


class GetPointBalanceUseCase:
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
    async def get_balance(self, *, user_id: int) -> PointBalance:
        now = utc_now()
        async with self.uow_factory() as uow:
            balance = await uow.loyalty_ledger.available_balance(user_id=user_id, at=now)
        return PointBalance(user_id=user_id, balance=balance, as_of=now)
