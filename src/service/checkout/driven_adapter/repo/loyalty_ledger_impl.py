"""
Loyalty Ledger (SQLAlchemy)

Grants carry a ``remaining`` counter. A debit walks the user's redeemable grants
earliest-expiry first and decrements each one with a conditional UPDATE
(``remaining >= take``); a lost race on any grant surfaces as a concurrency
conflict so the whole unit of work is retried from a fresh balance.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select, update as sql_update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.database.storage_error import translate_storage_errors
from src.platform.exception.exceptions import (
    ConcurrencyConflictError,
    InsufficientPointsError,
    ValidationError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import as_utc, utc_now
from src.service.checkout.app.interface.i_loyalty_ledger import ILoyaltyLedger
from src.service.checkout.domain.entity.point_transaction_entity import PointTransaction
from src.service.checkout.driven_adapter.model.point_transaction_model import (
    PointTransactionModel,
)


class LoyaltyLedgerImpl(ILoyaltyLedger):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _to_entity(db_row: PointTransactionModel) -> PointTransaction:
        return PointTransaction(
            id=db_row.id,
            user_id=db_row.user_id,
            points=db_row.points,
            remaining=db_row.remaining,
            description=db_row.description,
            expires_at=as_utc(db_row.expires_at),
            is_expired=db_row.is_expired,
            transaction_id=db_row.transaction_id,
            created_at=as_utc(db_row.created_at),
        )

    @staticmethod
    def _redeemable(user_id: int, at: datetime):
        return (
            PointTransactionModel.user_id == user_id,
            PointTransactionModel.points > 0,
            PointTransactionModel.is_expired.is_(False),
            PointTransactionModel.expires_at > at,
            PointTransactionModel.remaining > 0,
        )

    @Logger.io
    async def available_balance(self, *, user_id: int, at: datetime) -> int:
        with translate_storage_errors('point balance'):
            result = await self.session.execute(
                select(func.coalesce(func.sum(PointTransactionModel.remaining), 0)).where(
                    *self._redeemable(user_id, at)
                )
            )
            return int(result.scalar_one())

    @Logger.io
    async def debit(
        self,
        *,
        user_id: int,
        amount: int,
        description: str,
        at: datetime,
        transaction_id: Optional[UUID] = None,
    ) -> PointTransaction:
        if amount <= 0:
            raise ValidationError('Debit amount must be positive')

        with translate_storage_errors('point debit'):
            balance = await self.available_balance(user_id=user_id, at=at)
            if balance < amount:
                raise InsufficientPointsError(
                    f'Insufficient points: requested {amount}, available {balance}'
                )

            grants = (
                await self.session.execute(
                    select(PointTransactionModel.id, PointTransactionModel.remaining)
                    .where(*self._redeemable(user_id, at))
                    .order_by(PointTransactionModel.expires_at, PointTransactionModel.id)
                )
            ).all()

            left = amount
            for grant in grants:
                if left == 0:
                    break
                take = min(grant.remaining, left)
                consumed = await self.session.execute(
                    sql_update(PointTransactionModel)
                    .where(
                        PointTransactionModel.id == grant.id,
                        PointTransactionModel.remaining >= take,
                        PointTransactionModel.is_expired.is_(False),
                    )
                    .values(remaining=PointTransactionModel.remaining - take)
                    .returning(PointTransactionModel.id)
                    .execution_options(synchronize_session=False)
                )
                if consumed.scalar_one_or_none() is None:
                    raise ConcurrencyConflictError(
                        f'Point grant {grant.id} changed while debiting user {user_id}'
                    )
                left -= take

            if left > 0:
                raise InsufficientPointsError(
                    f'Insufficient points: requested {amount}, available {amount - left}'
                )

            db_row = PointTransactionModel(
                user_id=user_id,
                points=-amount,
                remaining=0,
                description=description,
                expires_at=at,
                is_expired=False,
                transaction_id=transaction_id,
                created_at=utc_now(),
            )
            self.session.add(db_row)
            await self.session.flush()

        Logger.base.info(f'💳 [POINTS] Debited {amount} point(s) from user {user_id}')
        return self._to_entity(db_row)

    @Logger.io
    async def credit(
        self,
        *,
        user_id: int,
        amount: int,
        description: str,
        expires_at: datetime,
        transaction_id: Optional[UUID] = None,
    ) -> PointTransaction:
        if amount <= 0:
            raise ValidationError('Credit amount must be positive')

        with translate_storage_errors('point credit'):
            db_row = PointTransactionModel(
                user_id=user_id,
                points=amount,
                remaining=amount,
                description=description,
                expires_at=expires_at,
                is_expired=False,
                transaction_id=transaction_id,
                created_at=utc_now(),
            )
            self.session.add(db_row)
            await self.session.flush()

        Logger.base.info(f'🎁 [POINTS] Credited {amount} point(s) to user {user_id}')
        return self._to_entity(db_row)

    @Logger.io
    async def expire_grants(self, *, at: datetime) -> int:
        with translate_storage_errors('point expiry'):
            result = await self.session.execute(
                sql_update(PointTransactionModel)
                .where(
                    PointTransactionModel.points > 0,
                    PointTransactionModel.is_expired.is_(False),
                    PointTransactionModel.expires_at <= at,
                )
                .values(is_expired=True)
                .returning(PointTransactionModel.id)
                .execution_options(synchronize_session=False)
            )
            return len(result.scalars().all())
