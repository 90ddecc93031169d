from collections.abc import Awaitable, Callable
from typing import TypeVar

import anyio

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import ConcurrencyConflictError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.checkout_metrics import metrics


_T = TypeVar('_T')


def backoff_delay(retry_count: int) -> float:
    """Exponential backoff: base * 2^(n-1), capped."""
    delay = settings.LOCK_RETRY_BASE_DELAY_SECONDS * (2 ** (retry_count - 1))
    return min(delay, settings.LOCK_RETRY_MAX_DELAY_SECONDS)


async def run_with_lock_retry(operation: Callable[[], Awaitable[_T]], *, name: str) -> _T:
    """
    Run ``operation`` and retry it on ConcurrencyConflictError.

    ``operation`` must open its own unit of work so every attempt starts from a
    clean transaction. Domain errors propagate immediately.
    """
    max_retries = settings.LOCK_RETRY_ATTEMPTS
    retry_count = 0

    while True:
        try:
            return await operation()
        except ConcurrencyConflictError:
            retry_count += 1
            if retry_count > max_retries:
                Logger.base.error(f'🔒 [RETRY] {name} gave up after {max_retries} retries')
                raise
            metrics.record_lock_retry(operation=name)
            wait_time = backoff_delay(retry_count)
            Logger.base.warning(
                f'🔒 [RETRY] {name} attempt {retry_count} conflicted, retrying in {wait_time:.3f}s'
            )
            await anyio.sleep(wait_time)
