"""
Unit of Work Pattern - one database transaction shared by every repository

Architecture:
- UoW owns the session lifecycle (opened on enter, rolled back and closed on exit)
- UoW owns commit/rollback
- Repositories receive the shared session from the UoW
- Use cases coordinate the inventory ledger, loyalty ledger, discount catalog and
  transaction rows through one UoW so they commit or roll back together
"""

from __future__ import annotations

import abc
from contextlib import AbstractAsyncContextManager
from typing import TYPE_CHECKING, Callable

from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.database.storage_error import translate_storage_errors


if TYPE_CHECKING:
    from src.service.checkout.app.interface.i_discount_catalog import IDiscountCatalog
    from src.service.checkout.app.interface.i_event_rating_repo import IEventRatingRepo
    from src.service.checkout.app.interface.i_inventory_ledger import IInventoryLedger
    from src.service.checkout.app.interface.i_loyalty_ledger import ILoyaltyLedger
    from src.service.checkout.app.interface.i_ticket_command_repo import ITicketCommandRepo
    from src.service.checkout.app.interface.i_transaction_command_repo import (
        ITransactionCommandRepo,
    )
    from src.service.checkout.app.interface.i_transaction_query_repo import (
        ITransactionQueryRepo,
    )


class AbstractUnitOfWork(abc.ABC):
    """
    Usage:
        async with uow_factory() as uow:
            handle = await uow.inventory_ledger.reserve(...)
            await uow.transaction_command_repo.create(...)
            await uow.commit()

    Leaving the block without commit() rolls everything back.
    """

    inventory_ledger: IInventoryLedger
    loyalty_ledger: ILoyaltyLedger
    discount_catalog: IDiscountCatalog
    transaction_command_repo: ITransactionCommandRepo
    transaction_query_repo: ITransactionQueryRepo
    ticket_command_repo: ITicketCommandRepo
    event_rating_repo: IEventRatingRepo

    async def __aenter__(self) -> AbstractUnitOfWork:
        return self

    async def __aexit__(self, *args) -> None:
        await self.rollback()

    async def commit(self) -> None:
        """Commit the transaction"""
        await self._commit()

    @abc.abstractmethod
    async def _commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def rollback(self) -> None:
        raise NotImplementedError


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    """
    SQLAlchemy implementation; each ``async with`` opens a fresh session from
    ``session_factory`` (``Database.session``).
    """

    def __init__(
        self, *, session_factory: Callable[[], AbstractAsyncContextManager[AsyncSession]]
    ) -> None:
        self.session_factory = session_factory
        self._session_cm: AbstractAsyncContextManager[AsyncSession] | None = None
        self.session: AsyncSession | None = None

    async def __aenter__(self) -> AbstractUnitOfWork:
        from src.service.checkout.driven_adapter.repo.discount_catalog_impl import (
            DiscountCatalogImpl,
        )
        from src.service.checkout.driven_adapter.repo.event_rating_repo_impl import (
            EventRatingRepoImpl,
        )
        from src.service.checkout.driven_adapter.repo.inventory_ledger_impl import (
            InventoryLedgerImpl,
        )
        from src.service.checkout.driven_adapter.repo.loyalty_ledger_impl import (
            LoyaltyLedgerImpl,
        )
        from src.service.checkout.driven_adapter.repo.ticket_command_repo_impl import (
            TicketCommandRepoImpl,
        )
        from src.service.checkout.driven_adapter.repo.transaction_command_repo_impl import (
            TransactionCommandRepoImpl,
        )
        from src.service.checkout.driven_adapter.repo.transaction_query_repo_impl import (
            TransactionQueryRepoImpl,
        )

        self._session_cm = self.session_factory()
        session = await self._session_cm.__aenter__()
        self.session = session

        # Repositories share the session, hence the database transaction
        self.inventory_ledger = InventoryLedgerImpl(session=session)
        self.loyalty_ledger = LoyaltyLedgerImpl(session=session)
        self.discount_catalog = DiscountCatalogImpl(session=session)
        self.transaction_command_repo = TransactionCommandRepoImpl(session=session)
        self.transaction_query_repo = TransactionQueryRepoImpl(session=session)
        self.ticket_command_repo = TicketCommandRepoImpl(session=session)
        self.event_rating_repo = EventRatingRepoImpl(session=session)

        return await super().__aenter__()

    async def __aexit__(self, *args) -> None:
        try:
            await super().__aexit__(*args)
        finally:
            session_cm, self._session_cm, self.session = self._session_cm, None, None
            if session_cm is not None:
                await session_cm.__aexit__(*args)

    async def _commit(self) -> None:
        if self.session is None:
            raise RuntimeError('UnitOfWork used outside of its context')
        with translate_storage_errors('commit'):
            await self.session.commit()

    async def rollback(self) -> None:
        if self.session is not None:
            await self.session.rollback()


UnitOfWorkFactory = Callable[[], AbstractUnitOfWork]
