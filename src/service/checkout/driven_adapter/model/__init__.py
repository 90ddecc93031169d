"""Import every model so Base.metadata is complete (create_all, alembic autogenerate)"""

from src.service.checkout.driven_adapter.model.discount_model import CouponModel, PromotionModel
from src.service.checkout.driven_adapter.model.event_model import EventModel, EventTierModel
from src.service.checkout.driven_adapter.model.point_transaction_model import (
    PointTransactionModel,
)
from src.service.checkout.driven_adapter.model.review_model import ReviewModel
from src.service.checkout.driven_adapter.model.seat_reservation_model import (
    SeatReservationModel,
)
from src.service.checkout.driven_adapter.model.ticket_model import TicketModel
from src.service.checkout.driven_adapter.model.transaction_model import TransactionModel

__all__ = [
    'CouponModel',
    'EventModel',
    'EventTierModel',
    'PointTransactionModel',
    'PromotionModel',
    'ReviewModel',
    'SeatReservationModel',
    'TicketModel',
    'TransactionModel',
]
