"""Checkout Application DTOs"""

from src.service.checkout.app.dto.create_transaction_dto import CreateTransactionRequest
from src.service.checkout.app.dto.point_balance_dto import PointBalance
from src.service.checkout.app.dto.sweep_result_dto import SweepResult


__all__ = [
    'CreateTransactionRequest',
    'PointBalance',
    'SweepResult',
]
