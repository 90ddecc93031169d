from uuid import UUID

from fastapi import APIRouter, Depends

from src.platform.logging.loguru_io import Logger
from src.service.checkout.app.command.check_in_ticket_use_case import CheckInTicketUseCase
from src.service.checkout.domain.value_object.current_user import CurrentUser
from src.service.checkout.driving_adapter.http_controller.auth.role_auth import (
    require_admin_or_seller,
)
from src.service.checkout.driving_adapter.http_controller.schema.transaction_schema import (
    TicketResponse,
)


router = APIRouter()


@router.post('/{ticket_id}/check-in')
@Logger.io
async def check_in_ticket(
    ticket_id: UUID,
    current_user: CurrentUser = Depends(require_admin_or_seller),
    use_case: CheckInTicketUseCase = Depends(CheckInTicketUseCase.depends),
) -> TicketResponse:
    ticket = await use_case.check_in(ticket_id=ticket_id)
    return TicketResponse.from_entity(ticket)
