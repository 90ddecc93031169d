from datetime import timedelta
from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.database.lock_retry import run_with_lock_retry
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import ValidationError
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import utc_now
from src.service.checkout.domain.entity.point_transaction_entity import PointTransaction


class GrantPointsUseCase:
    """Admin adjustment: positive points credit a grant, negative points debit."""

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
    async def grant(
        self,
        *,
        user_id: int,
        points: int,
        description: str,
        expires_in_days: Optional[int] = None,
    ) -> PointTransaction:
        if points == 0:
            raise ValidationError('Points must be a non-zero integer')
        if not description or not description.strip():
            raise ValidationError('Description is required')

        days = settings.POINT_DEFAULT_EXPIRY_DAYS if expires_in_days is None else expires_in_days
        if days <= 0:
            raise ValidationError('expires_in_days must be positive')

        return await run_with_lock_retry(
            lambda: self._apply_once(
                user_id=user_id, points=points, description=description.strip(), days=days
            ),
            name='grant_points',
        )

    async def _apply_once(
        self, *, user_id: int, points: int, description: str, days: int
    ) -> PointTransaction:
        now = utc_now()
        async with self.uow_factory() as uow:
            if points > 0:
                entry = await uow.loyalty_ledger.credit(
                    user_id=user_id,
                    amount=points,
                    description=description,
                    expires_at=now + timedelta(days=days),
                )
            else:
                entry = await uow.loyalty_ledger.debit(
                    user_id=user_id,
                    amount=-points,
                    description=description,
                    at=now,
                )
            await uow.commit()
        return entry
