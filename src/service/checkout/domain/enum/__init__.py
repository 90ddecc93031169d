"""Checkout Domain Enums"""

from src.service.checkout.domain.enum.discount_type import DiscountType
from src.service.checkout.domain.enum.reservation_state import ReservationState
from src.service.checkout.domain.enum.transaction_status import TransactionStatus
from src.service.checkout.domain.enum.user_role import UserRole

__all__ = ['DiscountType', 'ReservationState', 'TransactionStatus', 'UserRole']
