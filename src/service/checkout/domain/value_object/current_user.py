import attrs

from src.service.checkout.domain.enum.user_role import UserRole


@attrs.frozen
class CurrentUser:
    """Caller identity rebuilt from the JWT payload (no DB query)"""

    id: int
    email: str
    name: str
    role: UserRole
    is_active: bool = True

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def can_access_user(self, user_id: int) -> bool:
        return self.is_admin or self.id == user_id
