"""Translate database driver failures into service errors."""

import asyncio
import logging
from contextlib import contextmanager

from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError, ProgrammingError

from classboard.core.exceptions import StorePreconditionError, StoreUnavailableError

logger = logging.getLogger(__name__)


def is_connectivity_error(exc: BaseException) -> bool:
    if isinstance(exc, (OperationalError, InterfaceError)):
        return True
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return True
    return isinstance(exc, (OSError, asyncio.TimeoutError, ConnectionError))


@contextmanager
def store_errors(operation: str):
    """Re-raise store failures during `operation` as StoreUnavailableError / StorePreconditionError."""
    try:
        yield
    except ProgrammingError as exc:
        logger.error("Store rejected query during %s: %s", operation, exc)
        raise StorePreconditionError(f"Store cannot run the query for {operation}") from exc
    except Exception as exc:
        if is_connectivity_error(exc):
            logger.warning("Store unreachable during %s: %s", operation, exc)
            raise StoreUnavailableError() from exc
        raise
