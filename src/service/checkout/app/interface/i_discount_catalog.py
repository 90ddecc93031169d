from abc import ABC, abstractmethod
from uuid import UUID

from src.service.checkout.domain.entity.discount_entity import Coupon, Promotion


class IDiscountCatalog(ABC):
    @abstractmethod
    async def find_coupon(self, *, code: str) -> Coupon | None:
        pass

    @abstractmethod
    async def claim_coupon(self, *, coupon_id: int, transaction_id: UUID) -> bool:
        """Compare-and-set unused -> used; False if someone else used it first"""
        pass

    @abstractmethod
    async def restore_coupon(self, *, coupon_id: int) -> None:
        pass

    @abstractmethod
    async def find_promotion(self, *, event_id: int, code: str) -> Promotion | None:
        pass

    @abstractmethod
    async def claim_promotion(self, *, promotion_id: int) -> bool:
        """Increment usage below the limit; False when the limit is reached"""
        pass

    @abstractmethod
    async def restore_promotion(self, *, promotion_id: int) -> None:
        pass
