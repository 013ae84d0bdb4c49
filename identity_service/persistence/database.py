"""Database connection and session management."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from identity_service.core.exceptions import StoreUnavailable
from identity_service.settings import Settings, settings

logger = logging.getLogger(__name__)

# Base class for models
Base = declarative_base()

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def build_engine(config: Settings) -> AsyncEngine:
    """Create the pooled async engine for the contact store."""
    url = config.async_database_url
    options: dict = {"echo": False, "pool_pre_ping": True}
    if url.startswith("postgresql+asyncpg"):
        options.update(
            pool_size=config.db_pool_size,
            max_overflow=config.db_max_overflow,
            pool_timeout=config.db_pool_timeout_seconds,
            isolation_level=config.db_isolation_level,
            connect_args={
                "timeout": config.db_connect_timeout_seconds,
                "command_timeout": config.db_command_timeout_seconds,
            },
        )
    return create_async_engine(url, **options)


def get_engine() -> AsyncEngine:
    """Get the process-wide engine, creating it on first use."""
    global _engine, _session_factory
    if _engine is None:
        _engine = build_engine(settings)
        _session_factory = async_sessionmaker(
            _engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get the session factory bound to the process-wide engine."""
    get_engine()
    assert _session_factory is not None
    return _session_factory


async def dispose_engine() -> None:
    """Close every pooled connection."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None


async def get_db() -> AsyncIterator[AsyncSession]:
    """Dependency for getting database session."""
    async with get_session_factory()() as session:
        try:
            yield session
        finally:
            await session.close()


@asynccontextmanager
async def transaction(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Run a unit of work: commit on success, roll everything back otherwise.

    Store failures are raised as StoreUnavailable. Cancellation rolls back too.
    """
    try:
        yield session
        await session.commit()
    except (SQLAlchemyError, OSError, TimeoutError, asyncio.TimeoutError) as e:
        await session.rollback()
        logger.error(
            "Store transaction failed",
            extra={"error_type": type(e).__name__},
            exc_info=True,
        )
        raise StoreUnavailable() from e
    except BaseException:
        await session.rollback()
        raise
