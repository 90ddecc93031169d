from fastapi import APIRouter, Depends, status

from src.platform.exception.exceptions import ForbiddenError
from src.platform.logging.loguru_io import Logger
from src.service.checkout.app.command.grant_points_use_case import GrantPointsUseCase
from src.service.checkout.app.query.get_point_balance_use_case import GetPointBalanceUseCase
from src.service.checkout.domain.value_object.current_user import CurrentUser
from src.service.checkout.driving_adapter.http_controller.auth.role_auth import (
    get_current_user,
    require_admin,
)
from src.service.checkout.driving_adapter.http_controller.schema.point_schema import (
    PointBalanceResponse,
    PointGrantRequest,
    PointTransactionResponse,
)


router = APIRouter()


@router.post('/{user_id}/points', status_code=status.HTTP_201_CREATED)
@Logger.io
async def grant_points(
    user_id: int,
    request: PointGrantRequest,
    current_user: CurrentUser = Depends(require_admin),
    use_case: GrantPointsUseCase = Depends(GrantPointsUseCase.depends),
) -> PointTransactionResponse:
    entry = await use_case.grant(
        user_id=user_id,
        points=request.points,
        description=request.description,
        expires_in_days=request.expires_in_days,
    )
    return PointTransactionResponse.from_entity(entry)


@router.get('/{user_id}/points')
@Logger.io
async def get_point_balance(
    user_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    use_case: GetPointBalanceUseCase = Depends(GetPointBalanceUseCase.depends),
) -> PointBalanceResponse:
    if not current_user.can_access_user(user_id):
        raise ForbiddenError("You don't have permission to view these points")

    balance = await use_case.get_balance(user_id=user_id)
    return PointBalanceResponse(user_id=balance.user_id, balance=balance.balance, as_of=balance.as_of)
