"""
Loyalty Ledger Interface

Balance = sum of ``remaining`` over unexpired, unflagged grants. Debits consume
grants earliest-expiry first and never drive the balance negative.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from src.service.checkout.domain.entity.point_transaction_entity import PointTransaction


class ILoyaltyLedger(ABC):
    @abstractmethod
    async def available_balance(self, *, user_id: int, at: datetime) -> int:
        pass

    @abstractmethod
    async def debit(
        self,
        *,
        user_id: int,
        amount: int,
        description: str,
        at: datetime,
        transaction_id: Optional[UUID] = None,
    ) -> PointTransaction:
        """
        Raises:
            InsufficientPointsError: balance at ``at`` is below ``amount``
        """
        pass

    @abstractmethod
    async def credit(
        self,
        *,
        user_id: int,
        amount: int,
        description: str,
        expires_at: datetime,
        transaction_id: Optional[UUID] = None,
    ) -> PointTransaction:
        pass

    @abstractmethod
    async def expire_grants(self, *, at: datetime) -> int:
        """Flag grants whose expiry passed; returns how many were flagged"""
        pass
