"""
Unit tests for the supporting use cases: point grants, ticket check-in, events,
attendance and the read side.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID

import pytest

from src.platform.exception.exceptions import (
    ConcurrencyConflictError,
    InvalidStateTransitionError,
    NotFoundError,
    TransactionNotFoundError,
    ValidationError,
)
from src.service.checkout.app.command.check_in_ticket_use_case import CheckInTicketUseCase
from src.service.checkout.app.command.create_event_use_case import CreateEventUseCase
from src.service.checkout.app.command.grant_points_use_case import GrantPointsUseCase
from src.service.checkout.app.command.recompute_average_rating_use_case import (
    RecomputeAverageRatingUseCase,
)
from src.service.checkout.app.query.check_attendance_use_case import CheckAttendanceUseCase
from src.service.checkout.app.query.get_point_balance_use_case import GetPointBalanceUseCase
from src.service.checkout.app.query.get_transaction_use_case import GetTransactionUseCase
from src.service.checkout.domain.entity.event_entity import Event, EventTier
from src.service.checkout.domain.entity.ticket_entity import Ticket
from src.service.checkout.domain.enum.user_role import UserRole
from src.service.checkout.domain.value_object.current_user import CurrentUser


@pytest.mark.unit
class TestGrantPoints:
    @pytest.fixture
    def use_case(self, mock_uow_factory: MagicMock) -> GrantPointsUseCase:
        return GrantPointsUseCase(uow_factory=mock_uow_factory)

    @pytest.mark.asyncio
    async def test_positive_points_credit_with_default_expiry(self, use_case, mock_uow) -> None:
        """
        Given: An admin grants 5000 points without expires_in_days
        When: Applying the grant
        Then: A credit expiring 365 days from now is written and committed
        """
        before = datetime.now(timezone.utc)

        await use_case.grant(user_id=2, points=5000, description='  Welcome bonus ')

        credit_kwargs = mock_uow.loyalty_ledger.credit.await_args.kwargs
        assert credit_kwargs['user_id'] == 2
        assert credit_kwargs['amount'] == 5000
        assert credit_kwargs['description'] == 'Welcome bonus'
        expires_at = credit_kwargs['expires_at']
        assert before + timedelta(days=365) <= expires_at
        assert expires_at <= datetime.now(timezone.utc) + timedelta(days=365)
        mock_uow.loyalty_ledger.debit.assert_not_awaited()
        mock_uow.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_custom_expiry(self, use_case, mock_uow) -> None:
        before = datetime.now(timezone.utc)

        await use_case.grant(user_id=2, points=100, description='Promo', expires_in_days=30)

        expires_at = mock_uow.loyalty_ledger.credit.await_args.kwargs['expires_at']
        assert before + timedelta(days=30) <= expires_at < before + timedelta(days=31)

    @pytest.mark.asyncio
    async def test_negative_points_debit(self, use_case, mock_uow) -> None:
        await use_case.grant(user_id=2, points=-1000, description='Manual correction')

        debit_kwargs = mock_uow.loyalty_ledger.debit.await_args.kwargs
        assert debit_kwargs['amount'] == 1000
        mock_uow.loyalty_ledger.credit.assert_not_awaited()

    @pytest.mark.parametrize(
        'points,description,expires_in_days',
        [
            (0, 'Nothing', None),
            (100, '   ', None),
            (100, 'Promo', 0),
            (100, 'Promo', -5),
        ],
    )
    @pytest.mark.asyncio
    async def test_invalid_grant_is_rejected(
        self, use_case, mock_uow, points: int, description: str, expires_in_days
    ) -> None:
        with pytest.raises(ValidationError):
            await use_case.grant(
                user_id=2,
                points=points,
                description=description,
                expires_in_days=expires_in_days,
            )

        mock_uow.commit.assert_not_awaited()


@pytest.mark.unit
class TestCheckInTicket:
    @pytest.fixture
    def ticket(self) -> Ticket:
        return Ticket(
            id=UUID('00000000-0000-7000-8000-0000000000c1'),
            transaction_id=UUID('00000000-0000-7000-8000-00000000000a'),
            event_id=1,
            tier_name='VIP',
        )

    @pytest.fixture
    def use_case(self, mock_uow_factory: MagicMock) -> CheckInTicketUseCase:
        return CheckInTicketUseCase(uow_factory=mock_uow_factory)

    @pytest.mark.asyncio
    async def test_check_in(self, use_case, mock_uow, ticket: Ticket) -> None:
        mock_uow.ticket_command_repo.get_by_id = AsyncMock(return_value=ticket)
        mock_uow.ticket_command_repo.mark_used = AsyncMock(
            side_effect=lambda ticket: ticket
        )

        used = await use_case.check_in(ticket_id=ticket.id)

        assert used.is_used
        assert used.used_at is not None
        mock_uow.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unknown_ticket(self, use_case, mock_uow, ticket: Ticket) -> None:
        mock_uow.ticket_command_repo.get_by_id = AsyncMock(return_value=None)

        with pytest.raises(NotFoundError):
            await use_case.check_in(ticket_id=ticket.id)

    @pytest.mark.asyncio
    async def test_concurrent_check_in_loses(self, use_case, mock_uow, ticket: Ticket) -> None:
        mock_uow.ticket_command_repo.get_by_id = AsyncMock(return_value=ticket)
        mock_uow.ticket_command_repo.mark_used = AsyncMock(return_value=None)

        with pytest.raises(InvalidStateTransitionError):
            await use_case.check_in(ticket_id=ticket.id)

        mock_uow.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_locked_database_is_retried(
        self, use_case, mock_uow, mock_uow_factory: MagicMock, ticket: Ticket
    ) -> None:
        mock_uow.ticket_command_repo.get_by_id = AsyncMock(return_value=ticket)
        used_ticket = ticket.check_in(now=datetime.now(timezone.utc))
        mock_uow.ticket_command_repo.mark_used = AsyncMock(
            side_effect=[ConcurrencyConflictError('database is locked'), used_ticket]
        )

        used = await use_case.check_in(ticket_id=ticket.id)

        assert used.is_used
        assert mock_uow_factory.call_count == 2
        mock_uow.commit.assert_awaited_once()


@pytest.mark.unit
class TestEventUseCases:
    @pytest.mark.asyncio
    async def test_create_event_persists_inventory(self, mock_uow_factory, mock_uow) -> None:
        mock_uow.inventory_ledger.create_event = AsyncMock(
            side_effect=lambda event: Event(id=1, name=event.name, tiers=event.tiers)
        )
        use_case = CreateEventUseCase(uow_factory=mock_uow_factory)

        event = await use_case.create_event(
            name='Spring Concert', tiers=[EventTier(tier_name='VIP', price=100000, capacity=50)]
        )

        assert event.id == 1
        assert event.total_seats == 50
        mock_uow.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_event_retries_lock_conflict(self, mock_uow_factory, mock_uow) -> None:
        mock_uow.inventory_ledger.create_event = AsyncMock(
            side_effect=[
                ConcurrencyConflictError('database is locked'),
                Event(id=1, name='Spring Concert'),
            ]
        )
        use_case = CreateEventUseCase(uow_factory=mock_uow_factory)

        event = await use_case.create_event(
            name='Spring Concert', tiers=[EventTier(tier_name='VIP', price=100000, capacity=50)]
        )

        assert event.id == 1
        assert mock_uow_factory.call_count == 2

    @pytest.mark.asyncio
    async def test_invalid_event_never_reaches_storage(self, mock_uow_factory, mock_uow) -> None:
        use_case = CreateEventUseCase(uow_factory=mock_uow_factory)

        with pytest.raises(ValidationError):
            await use_case.create_event(name='Spring Concert', tiers=[])

        mock_uow_factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_recompute_rating_for_unknown_event(self, mock_uow_factory, mock_uow) -> None:
        mock_uow.inventory_ledger.get_event = AsyncMock(return_value=None)
        use_case = RecomputeAverageRatingUseCase(uow_factory=mock_uow_factory)

        with pytest.raises(NotFoundError):
            await use_case.recompute(event_id=99)

        mock_uow.event_rating_repo.recompute_average_rating.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_recompute_rating(self, mock_uow_factory, mock_uow) -> None:
        mock_uow.inventory_ledger.get_event = AsyncMock(return_value=Event(id=1, name='Concert'))
        mock_uow.event_rating_repo.recompute_average_rating = AsyncMock(return_value=4.33)
        use_case = RecomputeAverageRatingUseCase(uow_factory=mock_uow_factory)

        assert await use_case.recompute(event_id=1) == 4.33
        mock_uow.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_recompute_rating_retries_lock_conflict(
        self, mock_uow_factory, mock_uow
    ) -> None:
        mock_uow.inventory_ledger.get_event = AsyncMock(return_value=Event(id=1, name='Concert'))
        mock_uow.event_rating_repo.recompute_average_rating = AsyncMock(
            side_effect=[ConcurrencyConflictError('database is locked'), 4.5]
        )
        use_case = RecomputeAverageRatingUseCase(uow_factory=mock_uow_factory)

        assert await use_case.recompute(event_id=1) == 4.5
        assert mock_uow_factory.call_count == 2
        mock_uow.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_attendance(self, mock_uow_factory, mock_uow) -> None:
        mock_uow.transaction_query_repo.has_paid_transaction = AsyncMock(return_value=True)
        use_case = CheckAttendanceUseCase(uow_factory=mock_uow_factory)

        assert await use_case.attended(user_id=2, event_id=1) is True
        mock_uow.transaction_query_repo.has_paid_transaction.assert_awaited_once_with(
            user_id=2, event_id=1
        )


@pytest.mark.unit
class TestQueries:
    @pytest.mark.parametrize(
        'requester,visible',
        [
            (CurrentUser(id=2, email='b@test.com', name='Owner', role=UserRole.BUYER), True),
            (CurrentUser(id=1, email='a@test.com', name='Admin', role=UserRole.ADMIN), True),
            (CurrentUser(id=3, email='c@test.com', name='Other', role=UserRole.BUYER), False),
            (CurrentUser(id=4, email='s@test.com', name='Seller', role=UserRole.SELLER), False),
        ],
    )
    @pytest.mark.asyncio
    async def test_transaction_visibility(
        self, mock_uow_factory, mock_uow, make_transaction, requester: CurrentUser, visible: bool
    ) -> None:
        transaction = make_transaction(user_id=2)
        mock_uow.transaction_query_repo.get_by_id = AsyncMock(return_value=transaction)
        use_case = GetTransactionUseCase(uow_factory=mock_uow_factory)

        if visible:
            assert (
                await use_case.get_transaction(transaction_id=transaction.id, requester=requester)
                is transaction
            )
        else:
            with pytest.raises(TransactionNotFoundError):
                await use_case.get_transaction(transaction_id=transaction.id, requester=requester)

    @pytest.mark.asyncio
    async def test_point_balance(self, mock_uow_factory, mock_uow) -> None:
        mock_uow.loyalty_ledger.available_balance = AsyncMock(return_value=1200)
        use_case = GetPointBalanceUseCase(uow_factory=mock_uow_factory)

        balance = await use_case.get_balance(user_id=2)

        assert balance.user_id == 2
        assert balance.balance == 1200
        assert mock_uow.loyalty_ledger.available_balance.await_args.kwargs['at'] == balance.as_of
