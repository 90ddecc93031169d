from fastapi import APIRouter, Depends, status

from src.platform.logging.loguru_io import Logger
from src.service.checkout.app.command.create_event_use_case import CreateEventUseCase
from src.service.checkout.app.command.recompute_average_rating_use_case import (
    RecomputeAverageRatingUseCase,
)
from src.service.checkout.app.query.check_attendance_use_case import CheckAttendanceUseCase
from src.service.checkout.app.query.get_event_inventory_use_case import GetEventInventoryUseCase
from src.service.checkout.domain.entity.event_entity import EventTier
from src.service.checkout.domain.value_object.current_user import CurrentUser
from src.service.checkout.driving_adapter.http_controller.auth.role_auth import (
    get_current_user,
    require_admin,
)
from src.service.checkout.driving_adapter.http_controller.schema.event_schema import (
    AttendanceResponse,
    EventCreateRequest,
    EventInventoryResponse,
    RatingResponse,
)


router = APIRouter()


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_event(
    request: EventCreateRequest,
    current_user: CurrentUser = Depends(require_admin),
    use_case: CreateEventUseCase = Depends(CreateEventUseCase.depends),
) -> EventInventoryResponse:
    event = await use_case.create_event(
        name=request.name,
        tiers=[
            EventTier(tier_name=tier.tier, price=tier.price, capacity=tier.capacity)
            for tier in request.tiers
        ],
    )
    return EventInventoryResponse.from_entity(event)


@router.get('/{event_id}/inventory')
@Logger.io
async def get_event_inventory(
    event_id: int,
    use_case: GetEventInventoryUseCase = Depends(GetEventInventoryUseCase.depends),
) -> EventInventoryResponse:
    event = await use_case.get_inventory(event_id=event_id)
    return EventInventoryResponse.from_entity(event)


@router.get('/{event_id}/attendance')
@Logger.io
async def get_attendance(
    event_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    use_case: CheckAttendanceUseCase = Depends(CheckAttendanceUseCase.depends),
) -> AttendanceResponse:
    attended = await use_case.attended(user_id=current_user.id, event_id=event_id)
    return AttendanceResponse(user_id=current_user.id, event_id=event_id, attended=attended)


@router.post('/{event_id}/rating/recompute')
@Logger.io
async def recompute_rating(
    event_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    use_case: RecomputeAverageRatingUseCase = Depends(RecomputeAverageRatingUseCase.depends),
) -> RatingResponse:
    average = await use_case.recompute(event_id=event_id)
    return RatingResponse(event_id=event_id, average_rating=average)
