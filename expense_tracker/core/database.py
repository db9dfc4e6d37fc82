# expense_tracker/core/database.py
from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from fastapi import Request
import logging
from typing import Any, AsyncGenerator, Optional

from .config import Settings

logger = logging.getLogger(__name__)

# Base class for all models
Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ships with FK enforcement off; ON DELETE SET NULL depends on it
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    Owns the async engine and the session factory.

    Created once at application startup, handed to request handlers through
    ``get_async_session`` and disposed at shutdown.
    """

    def __init__(self, url: str, timeout: Optional[float] = None, **engine_kwargs: Any):
        self.url = url
        self.timeout = timeout
        engine_kwargs.setdefault("echo", False)
        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)

        if url.startswith("sqlite"):
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        # Storage-call timeout travels with every session (see db_utils.with_db_timeout)
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            expire_on_commit=False,
            class_=AsyncSession,
            info={"timeout": timeout},
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        engine_kwargs: dict = {"echo": settings.DEBUG}
        if not settings.is_sqlite:
            engine_kwargs.update(
                pool_size=settings.DB_POOL_SIZE,
                max_overflow=settings.DB_MAX_OVERFLOW,
                pool_timeout=settings.DB_POOL_TIMEOUT,  # Seconds to wait for a free connection
                pool_pre_ping=True,    # Check connection before using
                pool_recycle=300,      # Recycle connections after 5 minutes
            )
        return cls(settings.DATABASE_URL, timeout=settings.DB_TIMEOUT_SECONDS, **engine_kwargs)

    async def create_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Database engine disposed")


def get_database(request: Request) -> Database:
    return request.app.state.db


# Dependency to get DB session with proper exception handling
async def get_async_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    session = get_database(request).session_factory()
    try:
        yield session
    except SQLAlchemyError as e:
        # Log the error and rollback
        logger.error(f"Database session error: {str(e)}")
        await session.rollback()
        raise
    finally:
        # Always close the session
        await session.close()
        logger.debug("Database session closed")
