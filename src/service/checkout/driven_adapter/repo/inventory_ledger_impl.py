"""
Inventory Ledger (SQLAlchemy)

Seat counters live on ``event_tier``. Every mutation is one conditional UPDATE so
the database serializes competing writers on the tier row:

    reserve: held = held + q           WHERE held + sold + q <= capacity
    release: held = held - q           (after HELD -> RELEASED on the reservation)
    commit:  held = held - q, sold + q (after HELD -> COMMITTED on the reservation)

The reservation row's state flip is itself a compare-and-set, which makes
release/commit idempotent.
"""

from datetime import datetime
from typing import List
from uuid import UUID

from sqlalchemy import select, update as sql_update
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import InsufficientSeatsError, ValidationError
from src.platform.database.storage_error import translate_storage_errors
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import as_utc, utc_now
from src.service.checkout.app.interface.i_inventory_ledger import IInventoryLedger
from src.service.checkout.domain.entity.event_entity import Event, EventTier
from src.service.checkout.domain.enum.reservation_state import ReservationState
from src.service.checkout.domain.value_object.reservation_handle import ReservationHandle
from src.service.checkout.driven_adapter.model.event_model import EventModel, EventTierModel
from src.service.checkout.driven_adapter.model.seat_reservation_model import (
    SeatReservationModel,
)


class InventoryLedgerImpl(IInventoryLedger):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _to_tier(db_tier: EventTierModel) -> EventTier:
        return EventTier(
            event_id=db_tier.event_id,
            tier_name=db_tier.tier_name,
            price=db_tier.price,
            capacity=db_tier.capacity,
            held=db_tier.held,
            sold=db_tier.sold,
        )

    @staticmethod
    def _to_event(db_event: EventModel) -> Event:
        return Event(
            id=db_event.id,
            name=db_event.name,
            average_rating=db_event.average_rating,
            created_at=as_utc(db_event.created_at),
            tiers=[InventoryLedgerImpl._to_tier(tier) for tier in db_event.tiers],
        )

    @Logger.io
    async def reserve(self, *, event_id: int, tier_name: str, quantity: int) -> ReservationHandle:
        if quantity <= 0:
            raise ValidationError('Quantity must be a positive integer')

        with translate_storage_errors('seat reservation'):
            # First statement of the unit of work: takes the tier row lock
            stmt = (
                sql_update(EventTierModel)
                .where(
                    EventTierModel.event_id == event_id,
                    EventTierModel.tier_name == tier_name,
                    EventTierModel.held + EventTierModel.sold + quantity
                    <= EventTierModel.capacity,
                )
                .values(held=EventTierModel.held + quantity)
                .returning(EventTierModel.price)
                .execution_options(synchronize_session=False)
            )
            unit_price = (await self.session.execute(stmt)).scalar_one_or_none()

            if unit_price is None:
                tier = await self.get_tier(event_id=event_id, tier_name=tier_name)
                if tier is None:
                    raise ValidationError(f'Unknown tier {tier_name!r} for event {event_id}')
                raise InsufficientSeatsError(
                    f'Only {max(tier.available, 0)} seat(s) left in tier {tier_name!r}'
                )

            handle = ReservationHandle(
                id=uuid7(),
                event_id=event_id,
                tier_name=tier_name,
                quantity=quantity,
                unit_price=unit_price,
            )
            now = utc_now()
            self.session.add(
                SeatReservationModel(
                    id=handle.id,
                    event_id=event_id,
                    tier_name=tier_name,
                    quantity=quantity,
                    state=ReservationState.HELD.value,
                    created_at=now,
                    updated_at=now,
                )
            )
            await self.session.flush()

        Logger.base.info(
            f'🎟️ [RESERVE] Held {quantity} seat(s) event={event_id} tier={tier_name} handle={handle.id}'
        )
        return handle

    async def _finish_reservation(
        self, *, reservation_id: UUID, target: ReservationState, now: datetime
    ) -> SeatReservationModel | None:
        stmt = (
            sql_update(SeatReservationModel)
            .where(
                SeatReservationModel.id == reservation_id,
                SeatReservationModel.state == ReservationState.HELD.value,
            )
            .values(state=target.value, updated_at=now)
            .returning(
                SeatReservationModel.event_id,
                SeatReservationModel.tier_name,
                SeatReservationModel.quantity,
            )
            .execution_options(synchronize_session=False)
        )
        return (await self.session.execute(stmt)).one_or_none()

    @Logger.io
    async def release(self, *, reservation_id: UUID) -> bool:
        with translate_storage_errors('seat release'):
            row = await self._finish_reservation(
                reservation_id=reservation_id, target=ReservationState.RELEASED, now=utc_now()
            )
            if row is None:
                return False

            await self.session.execute(
                sql_update(EventTierModel)
                .where(
                    EventTierModel.event_id == row.event_id,
                    EventTierModel.tier_name == row.tier_name,
                )
                .values(held=EventTierModel.held - row.quantity)
                .execution_options(synchronize_session=False)
            )

        Logger.base.info(f'♻️ [RELEASE] Released {row.quantity} seat(s) handle={reservation_id}')
        return True

    @Logger.io
    async def commit(self, *, reservation_id: UUID) -> bool:
        with translate_storage_errors('seat commit'):
            row = await self._finish_reservation(
                reservation_id=reservation_id, target=ReservationState.COMMITTED, now=utc_now()
            )
            if row is None:
                return False

            await self.session.execute(
                sql_update(EventTierModel)
                .where(
                    EventTierModel.event_id == row.event_id,
                    EventTierModel.tier_name == row.tier_name,
                )
                .values(
                    held=EventTierModel.held - row.quantity,
                    sold=EventTierModel.sold + row.quantity,
                )
                .execution_options(synchronize_session=False)
            )

        Logger.base.info(f'✅ [COMMIT] Sold {row.quantity} seat(s) handle={reservation_id}')
        return True

    @Logger.io
    async def get_tier(self, *, event_id: int, tier_name: str) -> EventTier | None:
        with translate_storage_errors('tier lookup'):
            result = await self.session.execute(
                select(EventTierModel)
                .where(EventTierModel.event_id == event_id, EventTierModel.tier_name == tier_name)
                .execution_options(populate_existing=True)
            )
            db_tier = result.scalar_one_or_none()
        return self._to_tier(db_tier) if db_tier else None

    @Logger.io
    async def list_tiers(self, *, event_id: int) -> List[EventTier]:
        with translate_storage_errors('tier listing'):
            result = await self.session.execute(
                select(EventTierModel)
                .where(EventTierModel.event_id == event_id)
                .order_by(EventTierModel.id)
                .execution_options(populate_existing=True)
            )
            return [self._to_tier(db_tier) for db_tier in result.scalars().all()]

    @Logger.io
    async def create_event(self, *, event: Event) -> Event:
        with translate_storage_errors('event creation'):
            db_event = EventModel(name=event.name, created_at=utc_now())
            db_event.tiers = [
                EventTierModel(
                    tier_name=tier.tier_name,
                    price=tier.price,
                    capacity=tier.capacity,
                    held=0,
                    sold=0,
                )
                for tier in event.tiers
            ]
            self.session.add(db_event)
            await self.session.flush()
            return self._to_event(db_event)

    @Logger.io
    async def get_event(self, *, event_id: int) -> Event | None:
        with translate_storage_errors('event lookup'):
            result = await self.session.execute(
                select(EventModel)
                .where(EventModel.id == event_id)
                .execution_options(populate_existing=True)
            )
            db_event = result.scalar_one_or_none()
        return self._to_event(db_event) if db_event else None
