"""
Expiration Sweeper

Stateless and safe to run concurrently with itself and with payment
confirmations: each candidate is expired in its own unit of work and the status
compare-and-set picks a single winner. Triggered by the in-process timer and the
cron endpoint.
"""

import time
from datetime import datetime
from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.lock_retry import run_with_lock_retry
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import CustomBaseError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.checkout_metrics import metrics
from src.platform.types.utc_datetime import utc_now
from src.service.checkout.app.command.expire_transaction_use_case import ExpireTransactionUseCase
from src.service.checkout.app.dto import SweepResult


class SweepExpiredTransactionsUseCase:
    BATCH_LIMIT = 500

    def __init__(self, *, uow_factory: UnitOfWorkFactory) -> None:
        self.uow_factory = uow_factory
        self.expire_use_case = ExpireTransactionUseCase(uow_factory=uow_factory)

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.unit_of_work.provider]),
    ):
        return cls(uow_factory=uow_factory)

    @Logger.io
    async def sweep(self, *, trigger: str = 'timer', now: Optional[datetime] = None) -> SweepResult:
        swept_at = now or utc_now()
        result = SweepResult()

        async with self.uow_factory() as uow:
            candidate_ids = await uow.transaction_query_repo.list_overdue_pending_ids(
                now=swept_at, limit=self.BATCH_LIMIT
            )

        for transaction_id in candidate_ids:
            try:
                expired = await self.expire_use_case.expire(
                    transaction_id=transaction_id, now=swept_at
                )
            except CustomBaseError as e:
                result.failed_count += 1
                Logger.base.error(f'⌛ [SWEEP] Failed to expire {transaction_id}: {e.message}')
                continue
            except Exception:
                result.failed_count += 1
                Logger.base.exception(f'⌛ [SWEEP] Unexpected error expiring {transaction_id}')
                continue

            if expired is not None:
                result.expired_count += 1

        result.expired_points_count = await run_with_lock_retry(
            lambda: self._expire_point_grants(now=swept_at), name='expire_point_grants'
        )

        metrics.record_sweep(
            trigger=trigger,
            expired=result.expired_count,
            failed=result.failed_count,
            finished_at=time.time(),
        )
        if candidate_ids or result.expired_points_count:
            Logger.base.info(
                f'⌛ [SWEEP] trigger={trigger} candidates={len(candidate_ids)} '
                f'expired={result.expired_count} failed={result.failed_count} '
                f'expired_points={result.expired_points_count}'
            )
        else:
            Logger.base.debug(f'⌛ [SWEEP] trigger={trigger} nothing to expire')
        return result

    async def _expire_point_grants(self, *, now: datetime) -> int:
        async with self.uow_factory() as uow:
            flagged = await uow.loyalty_ledger.expire_grants(at=now)
            await uow.commit()
        return flagged
