from fastapi import APIRouter, Depends

from src.platform.logging.loguru_io import Logger
from src.service.checkout.app.command.sweep_expired_transactions_use_case import (
    SweepExpiredTransactionsUseCase,
)
from src.service.checkout.driving_adapter.http_controller.auth.role_auth import (
    require_cron_secret,
)
from src.service.checkout.driving_adapter.http_controller.schema.transaction_schema import (
    SweepResponse,
)


router = APIRouter()


@router.get('/expire', dependencies=[Depends(require_cron_secret)])
@Logger.io
async def expire_overdue_transactions(
    use_case: SweepExpiredTransactionsUseCase = Depends(SweepExpiredTransactionsUseCase.depends),
) -> SweepResponse:
    """External scheduler trigger; same sweep as the in-process timer"""
    result = await use_case.sweep(trigger='cron')
    return SweepResponse(
        expired_count=result.expired_count,
        expired_points_count=result.expired_points_count,
    )
