import secrets
from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import Cookie, Depends, Header
from opentelemetry import trace
from pydantic import SecretStr

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import AuthenticationError, ForbiddenError
from src.service.checkout.domain.enum.user_role import UserRole
from src.service.checkout.domain.value_object.current_user import CurrentUser
from src.service.checkout.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, credentials = authorization.partition(' ')
    if scheme.lower() != 'bearer' or not credentials.strip():
        return None
    return credentials.strip()


def _matches_secret(authorization: Optional[str], secret: SecretStr) -> bool:
    token = _bearer_token(authorization)
    expected = secret.get_secret_value()
    if not token or not expected:
        return False
    return secrets.compare_digest(token.encode(), expected.encode())


@inject
async def get_current_user(
    authorization: Optional[str] = Header(None),
    token: Optional[str] = Cookie(None, alias='fastapiusersauth'),
    jwt_auth: JwtAuth = Depends(Provide[Container.jwt_auth]),
) -> CurrentUser:
    """Stateless identity: Bearer header first, then the session cookie"""
    return jwt_auth.get_current_user_info_from_jwt(_bearer_token(authorization) or token)


async def require_admin(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    tracer = trace.get_tracer(__name__)
    with tracer.start_as_current_span(
        'auth.require_admin',
        attributes={
            'user.id': current_user.id,
            'user.role': current_user.role.value,
        },
    ):
        if not current_user.is_admin:
            raise ForbiddenError('Only admins can perform this action')
        return current_user


async def require_admin_or_seller(
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    if current_user.role not in [UserRole.ADMIN, UserRole.SELLER]:
        raise ForbiddenError("You don't have permission to perform this action")
    return current_user


async def require_cron_secret(authorization: Optional[str] = Header(None)) -> None:
    if not _matches_secret(authorization, settings.CRON_SECRET):
        raise AuthenticationError('Unauthorized')


async def require_payment_callback_secret(authorization: Optional[str] = Header(None)) -> None:
    if not _matches_secret(authorization, settings.PAYMENT_CALLBACK_SECRET):
        raise AuthenticationError('Unauthorized')
