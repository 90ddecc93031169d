import anyio
from anyio.abc import TaskGroup

from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.logging.loguru_io import Logger
from src.service.checkout.app.command.sweep_expired_transactions_use_case import (
    SweepExpiredTransactionsUseCase,
)


class ExpirationSweeper:
    """In-process timer that runs the expiration sweep every ``interval`` seconds"""

    def __init__(self, *, uow_factory: UnitOfWorkFactory, interval: float) -> None:
        self.use_case = SweepExpiredTransactionsUseCase(uow_factory=uow_factory)
        self.interval = interval

    async def start(self, *, task_group: TaskGroup) -> None:
        task_group.start_soon(self._sweep_loop)  # pyrefly: ignore[bad-argument-type]
        Logger.base.info(f'⏰ [Sweeper] Started, interval={self.interval}s')

    async def _sweep_loop(self) -> None:
        while True:
            await self.run_once()
            await anyio.sleep(self.interval)

    async def run_once(self) -> None:
        try:
            await self.use_case.sweep(trigger='timer')
        except Exception as e:
            # Next tick retries; the sweep is idempotent
            Logger.base.error(f'❌ [Sweeper] Sweep failed: {e}')
