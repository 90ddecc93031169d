"""
Storage error translation

Repositories wrap their statements in ``translate_storage_errors()`` so driver and
SQLAlchemy errors never leak past the driven adapters:

- lock timeouts, deadlocks, serialization failures, "database is locked"
  -> ConcurrencyConflictError (retried by the use case)
- anything else from SQLAlchemy -> logged with traceback, InternalError
"""

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from src.platform.exception.exceptions import ConcurrencyConflictError, InternalError
from src.platform.logging.loguru_io import Logger


# PostgreSQL SQLSTATE codes for contention
_CONTENTION_SQLSTATES = frozenset(
    {
        '40001',  # serialization_failure
        '40P01',  # deadlock_detected
        '55P03',  # lock_not_available
    }
)
_CONTENTION_MESSAGES = ('database is locked', 'database table is locked', 'deadlock')


def is_contention_error(error: SQLAlchemyError) -> bool:
    if isinstance(error, DBAPIError):
        orig = error.orig
        sqlstate = getattr(orig, 'sqlstate', None) or getattr(orig, 'pgcode', None)
        if sqlstate in _CONTENTION_SQLSTATES:
            return True
    message = str(error).lower()
    return any(fragment in message for fragment in _CONTENTION_MESSAGES)


@contextmanager
def translate_storage_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as e:
        if is_contention_error(e):
            Logger.base.warning(f'🔒 [DB] Contention during {operation}: {type(e).__name__}')
            raise ConcurrencyConflictError(
                f'Concurrent update conflict during {operation}, please retry'
            ) from e
        Logger.base.exception(f'💥 [DB] Storage failure during {operation}')
        raise InternalError('Internal storage failure') from e
