"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.checkout.app.command import (
    cancel_transaction_use_case,
    check_in_ticket_use_case,
    create_event_use_case,
    create_pending_transaction_use_case,
    expire_transaction_use_case,
    grant_points_use_case,
    mark_transaction_paid_use_case,
    recompute_average_rating_use_case,
    sweep_expired_transactions_use_case,
)
from src.service.checkout.app.query import (
    check_attendance_use_case,
    get_event_inventory_use_case,
    get_point_balance_use_case,
    get_transaction_use_case,
)
from src.service.checkout.driving_adapter.http_controller.auth import role_auth


WIRE_MODULES: list[ModuleType] = [
    create_pending_transaction_use_case,
    mark_transaction_paid_use_case,
    expire_transaction_use_case,
    cancel_transaction_use_case,
    sweep_expired_transactions_use_case,
    grant_points_use_case,
    create_event_use_case,
    check_in_ticket_use_case,
    recompute_average_rating_use_case,
    get_transaction_use_case,
    get_point_balance_use_case,
    check_attendance_use_case,
    get_event_inventory_use_case,
    role_auth,
]
