from uuid import UUID

from sqlalchemy import or_, select, update as sql_update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.database.storage_error import translate_storage_errors
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import as_utc
from src.service.checkout.app.interface.i_discount_catalog import IDiscountCatalog
from src.service.checkout.domain.entity.discount_entity import Coupon, Promotion
from src.service.checkout.domain.enum.discount_type import DiscountType
from src.service.checkout.driven_adapter.model.discount_model import CouponModel, PromotionModel


class DiscountCatalogImpl(IDiscountCatalog):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @Logger.io
    async def find_coupon(self, *, code: str) -> Coupon | None:
        with translate_storage_errors('coupon lookup'):
            result = await self.session.execute(
                select(CouponModel)
                .where(CouponModel.code == code)
                .execution_options(populate_existing=True)
            )
            db_coupon = result.scalar_one_or_none()

        if not db_coupon:
            return None
        return Coupon(
            id=db_coupon.id,
            code=db_coupon.code,
            user_id=db_coupon.user_id,
            discount_value=db_coupon.discount_value,
            discount_type=DiscountType(db_coupon.discount_type),
            expires_at=as_utc(db_coupon.expires_at),
            is_used=db_coupon.is_used,
        )

    @Logger.io
    async def claim_coupon(self, *, coupon_id: int, transaction_id: UUID) -> bool:
        with translate_storage_errors('coupon claim'):
            result = await self.session.execute(
                sql_update(CouponModel)
                .where(CouponModel.id == coupon_id, CouponModel.is_used.is_(False))
                .values(is_used=True, used_by_transaction_id=transaction_id)
                .returning(CouponModel.id)
                .execution_options(synchronize_session=False)
            )
            return result.scalar_one_or_none() is not None

    @Logger.io
    async def restore_coupon(self, *, coupon_id: int) -> None:
        with translate_storage_errors('coupon restore'):
            await self.session.execute(
                sql_update(CouponModel)
                .where(CouponModel.id == coupon_id)
                .values(is_used=False, used_by_transaction_id=None)
                .execution_options(synchronize_session=False)
            )

    @Logger.io
    async def find_promotion(self, *, event_id: int, code: str) -> Promotion | None:
        with translate_storage_errors('promotion lookup'):
            result = await self.session.execute(
                select(PromotionModel)
                .where(PromotionModel.event_id == event_id, PromotionModel.code == code)
                .execution_options(populate_existing=True)
            )
            db_promotion = result.scalar_one_or_none()

        if not db_promotion:
            return None
        return Promotion(
            id=db_promotion.id,
            event_id=db_promotion.event_id,
            code=db_promotion.code,
            discount_value=db_promotion.discount_value,
            discount_type=DiscountType(db_promotion.discount_type),
            start_date=as_utc(db_promotion.start_date),
            end_date=as_utc(db_promotion.end_date),
            is_active=db_promotion.is_active,
            usage_limit=db_promotion.usage_limit,
            usage_count=db_promotion.usage_count,
        )

    @Logger.io
    async def claim_promotion(self, *, promotion_id: int) -> bool:
        with translate_storage_errors('promotion claim'):
            result = await self.session.execute(
                sql_update(PromotionModel)
                .where(
                    PromotionModel.id == promotion_id,
                    or_(
                        PromotionModel.usage_limit.is_(None),
                        PromotionModel.usage_count < PromotionModel.usage_limit,
                    ),
                )
                .values(usage_count=PromotionModel.usage_count + 1)
                .returning(PromotionModel.id)
                .execution_options(synchronize_session=False)
            )
            return result.scalar_one_or_none() is not None

    @Logger.io
    async def restore_promotion(self, *, promotion_id: int) -> None:
        with translate_storage_errors('promotion restore'):
            await self.session.execute(
                sql_update(PromotionModel)
                .where(PromotionModel.id == promotion_id, PromotionModel.usage_count > 0)
                .values(usage_count=PromotionModel.usage_count - 1)
                .execution_options(synchronize_session=False)
            )
