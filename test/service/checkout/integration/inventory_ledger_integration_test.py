"""
Integration tests for the inventory ledger (SQLite via aiosqlite)

Test Focus:
1. held / sold accounting for reserve, commit and release
2. release and commit are idempotent per reservation
3. Concurrent reservations never oversell a tier
"""

import asyncio

import pytest

from src.platform.database.lock_retry import run_with_lock_retry
from src.platform.exception.exceptions import InsufficientSeatsError, ValidationError
from src.service.checkout.app.command.create_pending_transaction_use_case import (
    CreatePendingTransactionUseCase,
)
from src.service.checkout.app.dto import CreateTransactionRequest
from src.service.checkout.domain.entity.event_entity import EventTier


async def _tier(uow_factory, event_id: int, tier_name: str = 'VIP') -> EventTier:
    async with uow_factory() as uow:
        return await uow.inventory_ledger.get_tier(event_id=event_id, tier_name=tier_name)


async def _reserve(uow_factory, *, event_id: int, quantity: int, tier_name: str = 'VIP'):
    async def once():
        async with uow_factory() as uow:
            handle = await uow.inventory_ledger.reserve(
                event_id=event_id, tier_name=tier_name, quantity=quantity
            )
            await uow.commit()
            return handle

    return await run_with_lock_retry(once, name='test_reserve')


class TestInventoryLedger:
    @pytest.mark.asyncio
    async def test_reserve_commit_release_accounting(self, uow_factory, seed_event) -> None:
        """
        Given: A VIP tier with capacity 10
        When: Holding 3 and 2 seats, committing the first hold and releasing the second
        Then: held/sold follow each step and held + sold never exceeds capacity
        """
        event = await seed_event()

        first = await _reserve(uow_factory, event_id=event.id, quantity=3)
        second = await _reserve(uow_factory, event_id=event.id, quantity=2)
        tier = await _tier(uow_factory, event.id)
        assert (tier.held, tier.sold, tier.available) == (5, 0, 5)
        assert first.unit_price == 100000

        async with uow_factory() as uow:
            assert await uow.inventory_ledger.commit(reservation_id=first.id) is True
            assert await uow.inventory_ledger.release(reservation_id=second.id) is True
            await uow.commit()

        tier = await _tier(uow_factory, event.id)
        assert (tier.held, tier.sold, tier.available) == (0, 3, 7)

    @pytest.mark.asyncio
    async def test_release_and_commit_are_idempotent(self, uow_factory, seed_event) -> None:
        event = await seed_event()
        handle = await _reserve(uow_factory, event_id=event.id, quantity=2)

        async with uow_factory() as uow:
            assert await uow.inventory_ledger.release(reservation_id=handle.id) is True
            assert await uow.inventory_ledger.release(reservation_id=handle.id) is False
            assert await uow.inventory_ledger.commit(reservation_id=handle.id) is False
            await uow.commit()

        tier = await _tier(uow_factory, event.id)
        assert (tier.held, tier.sold) == (0, 0)

    @pytest.mark.asyncio
    async def test_reserve_more_than_available(self, uow_factory, seed_event) -> None:
        event = await seed_event()
        await _reserve(uow_factory, event_id=event.id, quantity=9)

        with pytest.raises(InsufficientSeatsError):
            await _reserve(uow_factory, event_id=event.id, quantity=2)

        tier = await _tier(uow_factory, event.id)
        assert tier.held == 9

    @pytest.mark.asyncio
    async def test_unknown_tier_and_bad_quantity(self, uow_factory, seed_event) -> None:
        event = await seed_event()

        with pytest.raises(ValidationError):
            await _reserve(uow_factory, event_id=event.id, quantity=1, tier_name='Balcony')
        with pytest.raises(ValidationError):
            await _reserve(uow_factory, event_id=event.id, quantity=0)

    @pytest.mark.asyncio
    async def test_rolled_back_unit_of_work_keeps_seats(self, uow_factory, seed_event) -> None:
        event = await seed_event()

        async with uow_factory() as uow:
            await uow.inventory_ledger.reserve(event_id=event.id, tier_name='VIP', quantity=4)
            # leave without commit

        tier = await _tier(uow_factory, event.id)
        assert tier.held == 0

    @pytest.mark.asyncio
    async def test_concurrent_reservations_for_last_seat(self, uow_factory, seed_event) -> None:
        """
        Given: A tier with capacity 1
        When: Two reservations for 1 seat run concurrently
        Then: Exactly one succeeds and the other fails with InsufficientSeatsError
        """
        event = await seed_event(tiers=[EventTier(tier_name='VIP', price=100000, capacity=1)])

        results = await asyncio.gather(
            _reserve(uow_factory, event_id=event.id, quantity=1),
            _reserve(uow_factory, event_id=event.id, quantity=1),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, Exception)]
        assert len(failures) == 1
        assert isinstance(failures[0], InsufficientSeatsError)
        tier = await _tier(uow_factory, event.id)
        assert (tier.held, tier.sold) == (1, 0)

    @pytest.mark.asyncio
    async def test_concurrent_checkouts_never_oversell(self, uow_factory, seed_event) -> None:
        """
        Given: A tier with capacity 3
        When: 6 buyers check out one seat each at the same time
        Then: 3 pending transactions exist and 3 buyers get InsufficientSeatsError
        """
        event = await seed_event(tiers=[EventTier(tier_name='VIP', price=100000, capacity=3)])
        use_case = CreatePendingTransactionUseCase(uow_factory=uow_factory)

        results = await asyncio.gather(
            *[
                use_case.create_pending(
                    request=CreateTransactionRequest(
                        user_id=user_id, event_id=event.id, tier_name='VIP', quantity=1
                    )
                )
                for user_id in range(10, 16)
            ],
            return_exceptions=True,
        )

        created = [r for r in results if not isinstance(r, Exception)]
        failures = [r for r in results if isinstance(r, Exception)]
        assert len(created) == 3
        assert len(failures) == 3
        assert all(isinstance(f, InsufficientSeatsError) for f in failures)
        tier = await _tier(uow_factory, event.id)
        assert (tier.held, tier.sold) == (3, 0)
