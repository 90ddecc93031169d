from uuid import UUID

from fastapi import APIRouter, Depends, status
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.checkout.app.command.cancel_transaction_use_case import CancelTransactionUseCase
from src.service.checkout.app.command.create_pending_transaction_use_case import (
    CreatePendingTransactionUseCase,
)
from src.service.checkout.app.command.mark_transaction_paid_use_case import (
    MarkTransactionPaidUseCase,
)
from src.service.checkout.app.dto import CreateTransactionRequest
from src.service.checkout.app.query.get_transaction_use_case import GetTransactionUseCase
from src.service.checkout.domain.value_object.current_user import CurrentUser
from src.service.checkout.driving_adapter.http_controller.auth.role_auth import (
    get_current_user,
    require_payment_callback_secret,
)
from src.service.checkout.driving_adapter.http_controller.schema.transaction_schema import (
    TransactionCreateRequest,
    TransactionResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_transaction(
    request: TransactionCreateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    use_case: CreatePendingTransactionUseCase = Depends(CreatePendingTransactionUseCase.depends),
) -> TransactionResponse:
    with tracer.start_as_current_span('controller.create_transaction') as span:
        span.set_attribute('event_id', request.event_id)
        span.set_attribute('tier', request.tier)
        span.set_attribute('user_id', current_user.id)

        transaction = await use_case.create_pending(
            request=CreateTransactionRequest(
                user_id=current_user.id,
                event_id=request.event_id,
                tier_name=request.tier,
                quantity=request.quantity,
                coupon_code=request.coupon_code,
                promotion_code=request.promotion_code,
                points_to_use=request.points_to_use,
            )
        )

        span.set_attribute('transaction.id', str(transaction.id))
        return TransactionResponse.from_entity(transaction)


@router.get('/{transaction_id}')
@Logger.io
async def get_transaction(
    transaction_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    use_case: GetTransactionUseCase = Depends(GetTransactionUseCase.depends),
) -> TransactionResponse:
    transaction = await use_case.get_transaction(
        transaction_id=transaction_id, requester=current_user
    )
    return TransactionResponse.from_entity(transaction)


@router.post(
    '/{transaction_id}/confirm-payment',
    dependencies=[Depends(require_payment_callback_secret)],
)
@Logger.io
async def confirm_payment(
    transaction_id: UUID,
    use_case: MarkTransactionPaidUseCase = Depends(MarkTransactionPaidUseCase.depends),
) -> TransactionResponse:
    """Called by the payment collaborator once the charge succeeded"""
    with tracer.start_as_current_span('controller.confirm_payment') as span:
        span.set_attribute('transaction.id', str(transaction_id))
        transaction = await use_case.mark_paid(transaction_id=transaction_id)
        return TransactionResponse.from_entity(transaction)


@router.post('/{transaction_id}/cancel')
@Logger.io
async def cancel_transaction(
    transaction_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    use_case: CancelTransactionUseCase = Depends(CancelTransactionUseCase.depends),
) -> TransactionResponse:
    transaction = await use_case.cancel(transaction_id=transaction_id, user_id=current_user.id)
    return TransactionResponse.from_entity(transaction)
