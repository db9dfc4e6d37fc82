"""
Database utilities for bounding storage calls
"""
import asyncio
import functools
import logging
from typing import Callable, Any, Optional, TypeVar, cast, Awaitable

from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

# Define a type variable for the return type of the decorated function
T = TypeVar('T')


class StorageTimeoutError(Exception):
    """Raised when a storage call exceeds the configured timeout."""


def _find_session(args: tuple, kwargs: dict) -> Optional[AsyncSession]:
    db = kwargs.get("db")
    if isinstance(db, AsyncSession):
        return db
    for arg in args:
        if isinstance(arg, AsyncSession):
            return arg
    return None


def with_db_timeout(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """
    Decorator that bounds a database operation by the session's timeout.

    The timeout is read from ``session.info["timeout"]`` (set by the
    Database session factory). Timeouts are raised as StorageTimeoutError
    and never retried: the caller reports them once as a server error.
    """
    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        session = _find_session(args, kwargs)
        timeout = session.info.get("timeout") if session is not None else None
        try:
            return await asyncio.wait_for(func(*args, **kwargs), timeout)
        except asyncio.TimeoutError as e:
            logger.error(f"Database operation {func.__name__} timed out after {timeout}s")
            raise StorageTimeoutError(f"{func.__name__} timed out") from e

    return cast(Callable[..., Awaitable[T]], wrapper)
