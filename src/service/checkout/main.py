"""
Checkout Service FastAPI Application

Serves the transaction API and runs the expiration sweeper in the lifespan task group.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import anyio
from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from src.platform.app_factory import create_app
from src.platform.config.core_setting import settings
from src.platform.config.di import cleanup, container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TracingConfig
from src.service.checkout.driving_adapter.scheduler.expiration_sweeper import ExpirationSweeper


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    Logger.base.info('🚀 [Checkout Service] Starting up...')

    tracing = TracingConfig(service_name='checkout-service')
    tracing.setup()
    Logger.base.info('📊 [Checkout Service] OpenTelemetry tracing configured')

    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Checkout Service] Dependency injection wired')

    database = container.database()
    tracing.instrument_sqlalchemy(engine=database.engine)
    Logger.base.info('🗄️  [Checkout Service] Database engine ready + instrumented')

    async with anyio.create_task_group() as tg:
        if settings.EXPIRATION_SWEEP_ENABLED:
            sweeper = ExpirationSweeper(
                uow_factory=container.unit_of_work.provider,
                interval=settings.EXPIRATION_SWEEP_INTERVAL_SECONDS,
            )
            await sweeper.start(task_group=tg)

        Logger.base.info('✅ [Checkout Service] Ready to serve requests')

        yield

        Logger.base.info('🛑 [Checkout Service] Shutting down...')
        tg.cancel_scope.cancel()

    await cleanup()
    Logger.base.info('🗄️  [Checkout Service] Database engine disposed')

    tracing.shutdown()
    container.unwire()

    Logger.base.info('👋 [Checkout Service] Shutdown complete')


app = create_app(
    lifespan=lifespan,
    description='Checkout Service - seat holds, pricing, payment confirmation and expiration',
)


@app.get('/')
async def root() -> RedirectResponse:
    """Root endpoint - redirect to docs."""
    return RedirectResponse(url='/docs')
